from django.contrib import admin

from .models import Order, OrderEvent, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("menu_name", "quantity", "unit_price", "get_line_item_total", "options")
    fields = readonly_fields
    can_delete = False

    def get_line_item_total(self, obj):
        return f"{obj.total_price:,.2f}"

    get_line_item_total.short_description = "Line Item Total"

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusHistoryInline(admin.TabularInline):
    """Status history is append-only: shown read-only, never edited here."""

    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("from_status", "to_status", "changed_by", "reason", "created_at")
    fields = readonly_fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "restaurant",
        "customer",
        "status",
        "payment_status",
        "total_amount",
        "estimated_cooking_time",
        "created_at",
    )
    list_display_links = ("order_number",)
    list_filter = ("status", "payment_status", "rejection_reason", "restaurant")
    search_fields = ("order_number", "customer__name", "customer__phone_number")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline, OrderStatusHistoryInline]

    # Status and lifecycle fields only change through the owner order actions
    readonly_fields = (
        "id",
        "order_number",
        "status",
        "confirmed_at",
        "cooking_started_at",
        "cooking_completed_at",
        "delivered_at",
        "rejected_at",
        "rejection_reason",
        "rejection_details",
        "customer_message",
        "created_at",
        "updated_at",
    )


@admin.register(OrderEvent)
class OrderEventAdmin(admin.ModelAdmin):
    list_display = ("order", "event_type", "triggered_by", "created_at")
    list_filter = ("event_type",)
    search_fields = ("order__order_number",)
    readonly_fields = ("order", "event_type", "triggered_by", "data", "created_at")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
