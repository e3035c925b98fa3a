import logging

from restaurants.models import Restaurant

from orders.exceptions import OrderActionError
from orders.models import Order

logger = logging.getLogger(__name__)


class AccessGuard:
    """
    Ownership checks run before every owner action.

    An owner may act on a restaurant only when they own it, and on an order
    only when they own the order's restaurant.
    """

    @staticmethod
    def assert_owner_controls_restaurant(owner_id, restaurant_id) -> None:
        restaurant_owner_id = Restaurant.objects.owner_id_for(restaurant_id)
        if restaurant_owner_id is None:
            raise OrderActionError.not_found(f"Restaurant {restaurant_id} not found")
        if str(restaurant_owner_id) != str(owner_id):
            logger.warning(
                f"Owner {owner_id} denied access to restaurant {restaurant_id}"
            )
            raise OrderActionError.forbidden(
                "You do not have permission to manage this restaurant"
            )

    @staticmethod
    def assert_owner_controls_order(owner_id, order_id) -> Order:
        """Resolves order -> restaurant -> owner and returns the order."""
        order = Order.objects.get_order(order_id)
        if order is None:
            raise OrderActionError.not_found(f"Order {order_id} not found")
        if str(order.restaurant.owner_id) != str(owner_id):
            logger.warning(f"Owner {owner_id} denied access to order {order_id}")
            raise OrderActionError.forbidden(
                "You do not have permission to manage this order"
            )
        return order

    @staticmethod
    def assert_order_in_restaurant(order, restaurant_id) -> None:
        if str(order.restaurant_id) != str(restaurant_id):
            raise OrderActionError.forbidden(
                f"Order {order.id} does not belong to restaurant {restaurant_id}"
            )


access_guard = AccessGuard()
