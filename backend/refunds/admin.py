from django.contrib import admin

from .models import RefundAttempt


@admin.register(RefundAttempt)
class RefundAttemptAdmin(admin.ModelAdmin):
    list_display = ("order", "amount", "status", "attempts", "created_at", "updated_at")
    list_filter = ("status",)
    search_fields = ("order__order_number", "payment_key")
    readonly_fields = (
        "id",
        "order",
        "payment_key",
        "amount",
        "reason",
        "status",
        "attempts",
        "last_error",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False
