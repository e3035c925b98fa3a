from rest_framework import serializers

from orders.config import MAX_COOKING_TIME, MIN_COOKING_TIME
from orders.models import Order
from orders.services.bulk_service import SUPPORTED_ACTIONS


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Input for moving an order to its next status.
    Whether the move is allowed is decided by the state machine, not here.
    """

    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
    cooking_time = serializers.IntegerField(
        required=False, allow_null=True, min_value=MIN_COOKING_TIME, max_value=MAX_COOKING_TIME
    )
    memo = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)
    notify_customer = serializers.BooleanField(required=False, default=True)


class RejectOrderSerializer(serializers.Serializer):
    rejection_reason = serializers.ChoiceField(choices=Order.RejectionReason.choices)
    detail_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)
    customer_message = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)
    auto_refund = serializers.BooleanField(required=False, default=True)


class CookingTimeSerializer(serializers.Serializer):
    estimated_cooking_time = serializers.IntegerField(
        min_value=MIN_COOKING_TIME, max_value=MAX_COOKING_TIME
    )
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)
    notify_customer = serializers.BooleanField(required=False, default=True)


class BulkActionSerializer(serializers.Serializer):
    order_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)
    action = serializers.ChoiceField(choices=[(action, action) for action in SUPPORTED_ACTIONS])
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=500)
    cooking_time = serializers.IntegerField(
        required=False, allow_null=True, min_value=MIN_COOKING_TIME, max_value=MAX_COOKING_TIME
    )
    rejection_reason = serializers.ChoiceField(
        choices=Order.RejectionReason.choices,
        required=False,
        default=Order.RejectionReason.OTHER,
    )
