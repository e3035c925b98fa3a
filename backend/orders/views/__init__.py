"""
Orders views package - owner order endpoints.
"""

from .order_viewset import OwnerOrderViewSet
from .restaurant_orders import RestaurantOrderViewSet

__all__ = [
    'OwnerOrderViewSet',
    'RestaurantOrderViewSet',
]
