import logging
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Q, Sum
from django.db.models.functions import ExtractHour
from django.utils import timezone

from orders.models import Order, OrderItem

logger = logging.getLogger(__name__)

Status = Order.OrderStatus
ZERO = Decimal("0.00")


class StatsAggregator:
    """
    Dashboard numbers for one restaurant: today, the last 7 days, the current
    month and the live queue. Revenue only ever counts COMPLETED orders.
    """

    def get_order_stats(self, restaurant_id, now=None):
        now = now or timezone.now()
        local_now = timezone.localtime(now)
        start_of_today = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_month = start_of_today.replace(day=1)
        start_of_week = now - timedelta(days=7)

        orders = Order.objects.for_restaurant(restaurant_id)

        return {
            "today": self._today(orders.created_since(start_of_today)),
            "this_week": self._period(orders.created_since(start_of_week)),
            "this_month": self._period(orders.created_since(start_of_month)),
            "pending": self._pending(orders, now),
        }

    @staticmethod
    def _revenue(queryset):
        """Returns (revenue, average order value) over COMPLETED orders."""
        completed = queryset.filter(status=Status.COMPLETED).aggregate(
            revenue=Sum("total_amount"), count=Count("id")
        )
        revenue = completed["revenue"] or ZERO
        average = (revenue / completed["count"]).quantize(ZERO) if completed["count"] else ZERO
        return revenue, average

    def _today(self, queryset):
        counts = queryset.aggregate(
            total=Count("id"),
            new=Count("id", filter=Q(status=Status.NEW)),
            confirmed=Count("id", filter=Q(status=Status.CONFIRMED)),
            preparing=Count("id", filter=Q(status=Status.PREPARING)),
            completed=Count("id", filter=Q(status=Status.COMPLETED)),
            rejected=Count("id", filter=Q(status=Status.REJECTED)),
        )
        revenue, average = self._revenue(queryset)
        return {
            "total_orders": counts["total"],
            "new_orders": counts["new"],
            "confirmed_orders": counts["confirmed"],
            "preparing_orders": counts["preparing"],
            "completed_orders": counts["completed"],
            "rejected_orders": counts["rejected"],
            "revenue": revenue,
            "average_order_value": average,
        }

    def _period(self, queryset):
        revenue, average = self._revenue(queryset)
        return {
            "total_orders": queryset.count(),
            "revenue": revenue,
            "average_order_value": average,
            "peak_hour": self._peak_hour(queryset),
            "popular_menu_item": self._popular_menu_item(queryset),
        }

    @staticmethod
    def _peak_hour(queryset):
        busiest = (
            queryset.annotate(hour=ExtractHour("created_at", tzinfo=timezone.get_current_timezone()))
            .values("hour")
            .annotate(count=Count("id"))
            .order_by("-count", "hour")
            .first()
        )
        if not busiest:
            return None
        return f"{busiest['hour']:02d}:00"

    @staticmethod
    def _popular_menu_item(queryset):
        # Rejected and cancelled orders were never served
        popular = (
            OrderItem.objects.filter(order__in=queryset.exclude(
                status__in=[Status.REJECTED, Status.CANCELLED]
            ))
            .values("menu_name")
            .annotate(quantity=Sum("quantity"))
            .order_by("-quantity", "menu_name")
            .first()
        )
        return popular["menu_name"] if popular else None

    @staticmethod
    def _pending(orders, now):
        waiting = list(orders.non_terminal().values_list("status", "created_at"))
        waits = [max((now - created_at).total_seconds() / 60, 0) for _, created_at in waiting]
        return {
            "new_orders": sum(1 for status, _ in waiting if status == Status.NEW),
            "preparing_orders": sum(1 for status, _ in waiting if status == Status.PREPARING),
            "average_wait_minutes": round(sum(waits) / len(waits), 1) if waits else 0,
            "longest_wait_minutes": round(max(waits), 1) if waits else 0,
        }


stats_aggregator = StatsAggregator()
