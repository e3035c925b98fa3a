from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_key", "order", "amount", "cancelled_amount", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("payment_key", "order__order_number")
    readonly_fields = ("id", "created_at", "updated_at")
