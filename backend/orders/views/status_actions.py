from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response

from orders.serializers import (
    CookingTimeSerializer,
    OrderStatusHistorySerializer,
    OwnerOrderDetailSerializer,
    RejectOrderSerializer,
    UpdateOrderStatusSerializer,
)
from orders.services import order_lifecycle_service


class StatusActionsMixin:
    """
    Mixin for order status transition actions

    This mixin provides action methods for OwnerOrderViewSet.
    """

    @action(detail=True, methods=["put"], url_path="status")
    def update_status(self, request: Request, pk=None) -> Response:
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = order_lifecycle_service.update_status(
            request.user.pk,
            pk,
            data["status"],
            cooking_time=data.get("cooking_time"),
            memo=data.get("memo"),
            notify_customer=data["notify_customer"],
        )
        return Response(OwnerOrderDetailSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request: Request, pk=None) -> Response:
        serializer = RejectOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = order_lifecycle_service.reject_order(
            request.user.pk,
            pk,
            data["rejection_reason"],
            detail_reason=data.get("detail_reason"),
            customer_message=data.get("customer_message"),
            auto_refund=data["auto_refund"],
        )
        return Response(OwnerOrderDetailSerializer(order).data)

    @action(detail=True, methods=["put"], url_path="cooking-time")
    def cooking_time(self, request: Request, pk=None) -> Response:
        serializer = CookingTimeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        order = order_lifecycle_service.set_cooking_time(
            request.user.pk,
            pk,
            data["estimated_cooking_time"],
            reason=data.get("reason"),
            notify_customer=data["notify_customer"],
        )
        return Response(OwnerOrderDetailSerializer(order).data)

    @action(detail=True, methods=["get"], url_path="history")
    def history(self, request: Request, pk=None) -> Response:
        entries = order_lifecycle_service.get_order_history(request.user.pk, pk)
        return Response(OrderStatusHistorySerializer(entries, many=True).data)
