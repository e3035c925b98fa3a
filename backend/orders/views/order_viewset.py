import logging

from rest_framework import viewsets
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import OwnerOrderDetailSerializer
from orders.services import order_lifecycle_service

from .base import OrderActionErrorMixin
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OwnerOrderViewSet(StatusActionsMixin, OrderActionErrorMixin, viewsets.ViewSet):
    """
    A single order, addressed by id, for the owner of its restaurant.

    - Detail (retrieve)
    - Status transitions, rejection, cooking time and history (StatusActionsMixin)
    """

    def retrieve(self, request: Request, pk=None) -> Response:
        order = order_lifecycle_service.get_order_detail(request.user.pk, pk)
        return Response(OwnerOrderDetailSerializer(order).data)
