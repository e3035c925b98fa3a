from rest_framework import viewsets

from .models import Restaurant
from .serializers import RestaurantSerializer


class OwnerRestaurantViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Restaurants owned by the requesting user. Other owners' restaurants
    are simply not found.
    """

    serializer_class = RestaurantSerializer

    def get_queryset(self):
        return Restaurant.objects.filter(owner=self.request.user)
