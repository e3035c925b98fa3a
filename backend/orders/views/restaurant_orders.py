import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import BulkActionSerializer, OwnerOrderListSerializer
from orders.services import bulk_action_processor, order_lifecycle_service

from .base import OrderActionErrorMixin

logger = logging.getLogger(__name__)

FILTER_PARAMS = (
    "status",
    "payment_status",
    "start_date",
    "end_date",
    "order_number",
    "customer_name",
    "urgent_only",
    "sort_by",
    "sort_order",
    "page",
    "limit",
)


class RestaurantOrderViewSet(OrderActionErrorMixin, viewsets.ViewSet):
    """
    Orders of one restaurant, as seen by its owner.

    Mounted under /restaurants/<restaurant_pk>/orders/.
    """

    def list(self, request: Request, restaurant_pk=None) -> Response:
        filters = {
            key: request.query_params.get(key)
            for key in FILTER_PARAMS
            if request.query_params.get(key) not in (None, "")
        }
        page = order_lifecycle_service.get_orders_for_owner(
            request.user.pk, restaurant_pk, filters
        )
        page["orders"] = OwnerOrderListSerializer(page["orders"], many=True).data
        return Response(page)

    @action(detail=False, methods=["get"], url_path="pending")
    def pending(self, request: Request, restaurant_pk=None) -> Response:
        orders = order_lifecycle_service.get_pending_orders(request.user.pk, restaurant_pk)
        return Response(
            {
                "orders": OwnerOrderListSerializer(orders, many=True).data,
                "urgent_count": sum(1 for order in orders if order.urgent),
            }
        )

    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request: Request, restaurant_pk=None) -> Response:
        stats = order_lifecycle_service.get_order_stats(request.user.pk, restaurant_pk)
        return Response(stats)

    @action(detail=False, methods=["post"], url_path="bulk-action")
    def bulk_action(self, request: Request, restaurant_pk=None) -> Response:
        serializer = BulkActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = bulk_action_processor.bulk_order_action(
            request.user.pk,
            restaurant_pk,
            data["order_ids"],
            data["action"],
            reason=data.get("reason"),
            cooking_time=data.get("cooking_time"),
            rejection_reason=data["rejection_reason"],
        )
        return Response(result.to_dict(), status=status.HTTP_200_OK)
