"""
Orders serializers package - owner order views and action inputs.
"""

# Order representations
from .order_serializers import (
    OrderItemSerializer,
    OrderCustomerSerializer,
    OrderStatusHistorySerializer,
    OwnerOrderListSerializer,
    OwnerOrderDetailSerializer,
)

# Action inputs
from .action_serializers import (
    UpdateOrderStatusSerializer,
    RejectOrderSerializer,
    CookingTimeSerializer,
    BulkActionSerializer,
)

__all__ = [
    # Orders
    'OrderItemSerializer',
    'OrderCustomerSerializer',
    'OrderStatusHistorySerializer',
    'OwnerOrderListSerializer',
    'OwnerOrderDetailSerializer',
    # Actions
    'UpdateOrderStatusSerializer',
    'RejectOrderSerializer',
    'CookingTimeSerializer',
    'BulkActionSerializer',
]
