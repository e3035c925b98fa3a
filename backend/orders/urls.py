from django.urls import path, include
from rest_framework import routers
from rest_framework_nested import routers as nested_routers

from restaurants.views import OwnerRestaurantViewSet
from .views import OwnerOrderViewSet, RestaurantOrderViewSet

app_name = "orders"

router = routers.DefaultRouter()
router.register(r"restaurants", OwnerRestaurantViewSet, basename="owner-restaurant")
router.register(r"orders", OwnerOrderViewSet, basename="owner-order")

restaurants_router = nested_routers.NestedSimpleRouter(router, r"restaurants", lookup="restaurant")
restaurants_router.register(r"orders", RestaurantOrderViewSet, basename="restaurant-order")

urlpatterns = [
    # Include the nested router URLs first for precedence.
    path("", include(restaurants_router.urls)),
    path("", include(router.urls)),
]
