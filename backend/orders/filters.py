from datetime import datetime, time

import django_filters
from django.utils import timezone

from .config import order_settings
from .models import Order

SORT_FIELDS = ("created_at", "updated_at", "total_amount")


class OwnerOrderFilter(django_filters.FilterSet):
    """
    Filters for the owner order list.

    start_date/end_date are whole days in the active timezone: an order placed
    at any time on end_date is included. Sorting always adds the primary key
    as a tie breaker so pages stay stable.
    """

    status = django_filters.ChoiceFilter(choices=Order.OrderStatus.choices)
    payment_status = django_filters.ChoiceFilter(choices=Order.PaymentStatus.choices)
    start_date = django_filters.DateFilter(method="filter_start_date")
    end_date = django_filters.DateFilter(method="filter_end_date")
    order_number = django_filters.CharFilter(field_name="order_number", lookup_expr="icontains")
    customer_name = django_filters.CharFilter(field_name="customer__name", lookup_expr="icontains")
    urgent_only = django_filters.BooleanFilter(method="filter_urgent_only")

    sort_by = django_filters.ChoiceFilter(
        choices=[(field, field) for field in SORT_FIELDS], method="keep_queryset"
    )
    sort_order = django_filters.ChoiceFilter(
        choices=[("ASC", "Ascending"), ("DESC", "Descending")], method="keep_queryset"
    )

    class Meta:
        model = Order
        fields = ["status", "payment_status"]

    def filter_start_date(self, queryset, name, value):
        start = timezone.make_aware(datetime.combine(value, time.min))
        return queryset.filter(created_at__gte=start)

    def filter_end_date(self, queryset, name, value):
        end = timezone.make_aware(datetime.combine(value, time.max))
        return queryset.filter(created_at__lte=end)

    def filter_urgent_only(self, queryset, name, value):
        if not value:
            return queryset
        return queryset.urgent(order_settings.urgent_order_minutes)

    def keep_queryset(self, queryset, name, value):
        # Ordering is applied once in filter_queryset()
        return queryset

    def filter_queryset(self, queryset):
        queryset = super().filter_queryset(queryset)
        sort_by = self.form.cleaned_data.get("sort_by") or "created_at"
        sort_order = self.form.cleaned_data.get("sort_order") or "DESC"
        prefix = "-" if sort_order == "DESC" else ""
        return queryset.order_by(f"{prefix}{sort_by}", f"{prefix}id")
