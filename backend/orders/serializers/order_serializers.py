from rest_framework import serializers

from customers.models import Customer
from orders import state_machine
from orders.models import Order, OrderItem, OrderStatusHistory


class OrderItemSerializer(serializers.ModelSerializer):
    total_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menu_id",
            "menu_name",
            "quantity",
            "unit_price",
            "total_price",
            "options",
            "special_requests",
        ]


class OrderCustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "name", "phone_number"]


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = OrderStatusHistory
        fields = ["id", "from_status", "to_status", "changed_by", "reason", "created_at"]

    def get_changed_by(self, obj):
        return obj.changed_by_id


class OwnerOrderListSerializer(serializers.ModelSerializer):
    """
    Compact order representation for lists and the pending queue.
    """

    customer = OrderCustomerSerializer(read_only=True)
    item_count = serializers.SerializerMethodField()
    is_urgent = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "payment_status",
            "customer",
            "total_amount",
            "estimated_cooking_time",
            "item_count",
            "is_urgent",
            "created_at",
            "updated_at",
        ]

    def get_item_count(self, obj):
        # items are prefetched by the service
        return sum(item.quantity for item in obj.items.all())

    def get_is_urgent(self, obj):
        return getattr(obj, "urgent", False)


class OwnerOrderDetailSerializer(OwnerOrderListSerializer):
    """
    Full order view: items, pricing, timestamps, rejection block and history.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    rejection = serializers.SerializerMethodField()
    next_statuses = serializers.SerializerMethodField()
    refund = serializers.SerializerMethodField()

    class Meta(OwnerOrderListSerializer.Meta):
        fields = OwnerOrderListSerializer.Meta.fields + [
            "restaurant",
            "items",
            "subtotal",
            "delivery_fee",
            "discount_amount",
            "delivery_address",
            "special_requests",
            "confirmed_at",
            "cooking_started_at",
            "cooking_completed_at",
            "delivered_at",
            "rejection",
            "next_statuses",
            "status_history",
            "refund",
        ]

    def get_rejection(self, obj):
        rejection = obj.rejection
        if rejection is None:
            return None
        return {
            "reason": rejection["reason"],
            "details": rejection["details"],
            "customer_message": rejection["customer_message"],
            "rejected_at": serializers.DateTimeField().to_representation(rejection["rejected_at"])
            if rejection["rejected_at"]
            else None,
        }

    def get_next_statuses(self, obj):
        return state_machine.next_statuses(obj.status)

    def get_refund(self, obj):
        # Only present right after a rejection that triggered a refund
        result = getattr(obj, "refund_result", None)
        if result is None:
            return None
        return {"success": result.success, "amount": str(result.amount), "error": result.error}
