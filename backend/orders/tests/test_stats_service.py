"""
Order statistics tests, evaluated against a fixed "now" of
2024-05-15 14:00 in the active timezone.
"""
from datetime import datetime
from decimal import Decimal

import pytest
from django.utils import timezone

from orders.exceptions import ErrorKind, OrderActionError
from orders.models import Order
from orders.services.lifecycle_service import OrderLifecycleService
from orders.services.stats_service import StatsAggregator

S = Order.OrderStatus


def local(month, day, hour, minute=0):
    return timezone.make_aware(datetime(2024, month, day, hour, minute))


NOW = local(5, 15, 14)


@pytest.fixture
def stats_orders(order_factory, second_restaurant):
    # Today
    order_factory(
        status=S.COMPLETED,
        created_at=local(5, 15, 12, 10),
        total_amount=Decimal("20000.00"),
        items=[("Pepperoni", 10, Decimal("2000.00"))],
    )
    order_factory(status=S.COMPLETED, created_at=local(5, 15, 12, 40), total_amount=Decimal("10000.00"))
    order_factory(status=S.NEW, created_at=local(5, 15, 13, 0))
    order_factory(status=S.PREPARING, created_at=local(5, 15, 13, 30))
    order_factory(
        status=S.REJECTED,
        created_at=local(5, 15, 9, 0),
        items=[("Calzone", 50, Decimal("300.00"))],
    )
    # Earlier this week
    order_factory(status=S.COMPLETED, created_at=local(5, 12, 12, 30), total_amount=Decimal("30000.00"))
    # Earlier this month
    order_factory(status=S.COMPLETED, created_at=local(5, 2, 18, 0), total_amount=Decimal("7000.00"))
    # Last month
    order_factory(status=S.COMPLETED, created_at=local(4, 25, 12, 0), total_amount=Decimal("5000.00"))
    # Another restaurant never leaks in
    order_factory(
        restaurant=second_restaurant,
        status=S.COMPLETED,
        created_at=local(5, 15, 11, 0),
        total_amount=Decimal("99999.00"),
    )


@pytest.mark.django_db
class TestOrderStats:
    def test_today(self, restaurant, stats_orders):
        today = StatsAggregator().get_order_stats(restaurant.pk, now=NOW)["today"]

        assert today == {
            "total_orders": 5,
            "new_orders": 1,
            "confirmed_orders": 0,
            "preparing_orders": 1,
            "completed_orders": 2,
            "rejected_orders": 1,
            "revenue": Decimal("30000.00"),
            "average_order_value": Decimal("15000.00"),
        }

    def test_this_week(self, restaurant, stats_orders):
        week = StatsAggregator().get_order_stats(restaurant.pk, now=NOW)["this_week"]

        assert week["total_orders"] == 6
        assert week["revenue"] == Decimal("60000.00")
        assert week["average_order_value"] == Decimal("20000.00")
        assert week["peak_hour"] == "12:00"
        # Calzone only appears on a rejected order
        assert week["popular_menu_item"] == "Pepperoni"

    def test_this_month(self, restaurant, stats_orders):
        month = StatsAggregator().get_order_stats(restaurant.pk, now=NOW)["this_month"]

        assert month["total_orders"] == 7
        assert month["revenue"] == Decimal("67000.00")
        assert month["average_order_value"] == Decimal("16750.00")

    def test_pending_queue(self, restaurant, stats_orders):
        pending = StatsAggregator().get_order_stats(restaurant.pk, now=NOW)["pending"]

        assert pending == {
            "new_orders": 1,
            "preparing_orders": 1,
            "average_wait_minutes": 45.0,
            "longest_wait_minutes": 60.0,
        }

    def test_empty_restaurant(self, restaurant):
        stats = StatsAggregator().get_order_stats(restaurant.pk, now=NOW)

        assert stats["today"]["total_orders"] == 0
        assert stats["today"]["revenue"] == Decimal("0.00")
        assert stats["today"]["average_order_value"] == Decimal("0.00")
        assert stats["this_week"]["peak_hour"] is None
        assert stats["this_week"]["popular_menu_item"] is None
        assert stats["pending"]["average_wait_minutes"] == 0
        assert stats["pending"]["longest_wait_minutes"] == 0

    def test_stats_require_ownership(self, other_owner, restaurant):
        with pytest.raises(OrderActionError) as exc_info:
            OrderLifecycleService().get_order_stats(other_owner.pk, restaurant.pk, now=NOW)
        assert exc_info.value.kind == ErrorKind.FORBIDDEN
