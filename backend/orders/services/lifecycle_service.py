"""
Owner-facing order lifecycle: status changes, rejection, cooking time and reads.

Every status write is a compare-and-set against the status this request read,
so two owners racing on the same order produce exactly one winner and one
Conflict. Side effects (audit, refund, notifications) run after the write has
been committed and never undo it.
"""

import logging
import math

from django.utils import timezone

from notifications.services import NotificationRelay, notification_relay as default_relay
from refunds.services import RefundCoordinator, refund_coordinator as default_refund_coordinator

from orders import state_machine
from orders.config import MAX_COOKING_TIME, MIN_COOKING_TIME, order_settings
from orders.exceptions import OrderActionError
from orders.filters import OwnerOrderFilter
from orders.models import Order, OrderEvent

from .access_guard import access_guard
from .audit_service import AuditTrail, audit_trail as default_audit_trail
from .stats_service import StatsAggregator, stats_aggregator as default_stats_aggregator

logger = logging.getLogger(__name__)

Status = Order.OrderStatus


def rejection_label(reason) -> str:
    return str(Order.RejectionReason(reason).label)


def validate_cooking_time(minutes) -> int:
    # Accepts 45 or "45"; rejects 45.5, True and None
    try:
        value = int(str(minutes))
    except ValueError:
        raise OrderActionError.validation("Cooking time must be a whole number of minutes")
    if not MIN_COOKING_TIME <= value <= MAX_COOKING_TIME:
        raise OrderActionError.validation(
            f"Cooking time must be between {MIN_COOKING_TIME} and {MAX_COOKING_TIME} minutes"
        )
    return value


class OrderLifecycleService:
    def __init__(
        self,
        refund_coordinator: RefundCoordinator = None,
        notification_relay: NotificationRelay = None,
        audit_trail: AuditTrail = None,
        stats_aggregator: StatsAggregator = None,
    ):
        self.refund_coordinator = refund_coordinator or default_refund_coordinator
        self.notification_relay = notification_relay or default_relay
        self.audit_trail = audit_trail or default_audit_trail
        self.stats_aggregator = stats_aggregator or default_stats_aggregator

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_status(
        self, owner_id, order_id, new_status, cooking_time=None, memo=None, notify_customer=True
    ) -> Order:
        order = access_guard.assert_owner_controls_order(owner_id, order_id)

        if new_status not in Status.values:
            raise OrderActionError.validation(f"Unknown order status: {new_status}")
        if new_status == Status.REJECTED:
            raise OrderActionError.validation(
                "Orders are rejected through the reject action, which records a reason"
            )
        if cooking_time is not None:
            cooking_time = validate_cooking_time(cooking_time)

        from_status = order.status
        state_machine.validate_transition(from_status, new_status)
        if cooking_time is not None and not {from_status, new_status} <= (
            state_machine.COOKING_TIME_EDITABLE_STATUSES
        ):
            raise OrderActionError.invalid_transition(
                f"Cooking time cannot be changed on a {from_status} -> {new_status} transition"
            )

        now = timezone.now()
        fields = {}
        timestamp_field = state_machine.TIMESTAMP_FIELDS.get(new_status)
        if timestamp_field and getattr(order, timestamp_field) is None:
            fields[timestamp_field] = now
        if cooking_time is not None:
            fields["estimated_cooking_time"] = cooking_time

        self._compare_and_set(order, from_status, new_status, **fields)
        logger.info(f"Order {order.order_number} {from_status} -> {new_status} by owner {owner_id}")

        self.audit_trail.append(order, from_status, new_status, changed_by=owner_id, reason=memo, timestamp=now)
        self.audit_trail.record_event(
            order,
            state_machine.EVENT_TYPES[new_status],
            triggered_by=owner_id,
            data={
                "from_status": from_status,
                "to_status": new_status,
                "memo": memo,
                "estimated_cooking_time": cooking_time,
            },
        )

        order = self._reload(order)
        payload = self._build_payload(order, "order_status_changed", previous_status=from_status)
        self._notify_owner(owner_id, order, payload)
        if notify_customer:
            self._notify_customer(order, payload)
        return order

    def reject_order(
        self,
        owner_id,
        order_id,
        reason,
        detail_reason=None,
        customer_message=None,
        auto_refund=True,
    ) -> Order:
        order = access_guard.assert_owner_controls_order(owner_id, order_id)

        if reason not in Order.RejectionReason.values:
            raise OrderActionError.validation(f"Unknown rejection reason: {reason}")

        from_status = order.status
        if from_status not in state_machine.REJECTABLE_STATUSES:
            raise OrderActionError.invalid_transition(
                f"Only new or confirmed orders can be rejected (order is {from_status})"
            )
        state_machine.validate_transition(from_status, Status.REJECTED)

        label = rejection_label(reason)
        message = customer_message or f"Sorry, we could not process your order: {label}."
        now = timezone.now()

        self._compare_and_set(
            order,
            from_status,
            Status.REJECTED,
            rejected_at=now,
            rejection_reason=reason,
            rejection_details=detail_reason,
            customer_message=message,
        )
        logger.info(f"Order {order.order_number} rejected by owner {owner_id}: {reason}")

        refund = None
        if auto_refund and order.payment_status == Order.PaymentStatus.COMPLETED:
            refund = self._refund(order, label)

        audit_reason = f"Rejected: {label}"
        if detail_reason:
            audit_reason = f"{audit_reason} - {detail_reason}"
        self.audit_trail.append(
            order, from_status, Status.REJECTED, changed_by=owner_id, reason=audit_reason, timestamp=now
        )
        self.audit_trail.record_event(
            order,
            OrderEvent.EventType.REJECTED,
            triggered_by=owner_id,
            data={
                "reason": reason,
                "details": detail_reason,
                "refund_requested": refund is not None,
                "refund_succeeded": bool(refund and refund.success),
            },
        )

        order = self._reload(order)
        order.refund_result = refund
        payload = self._build_payload(order, "order_rejected", previous_status=from_status)
        self._notify_owner(owner_id, order, payload)
        self._notify_customer(order, payload)
        return order

    def set_cooking_time(self, owner_id, order_id, minutes, reason=None, notify_customer=True) -> Order:
        order = access_guard.assert_owner_controls_order(owner_id, order_id)

        if order.status not in state_machine.COOKING_TIME_EDITABLE_STATUSES:
            raise OrderActionError.invalid_transition(
                f"Cooking time cannot be changed once an order is {order.status}"
            )
        minutes = validate_cooking_time(minutes)

        previous = order.estimated_cooking_time
        updated = Order.objects.compare_and_set_fields(
            order.pk, order.status, estimated_cooking_time=minutes
        )
        if not updated:
            logger.warning(f"Cooking time update lost a race on order {order.pk}")
            raise OrderActionError.conflict(
                "The order was changed by another request; reload and try again"
            )

        self.audit_trail.record_event(
            order,
            OrderEvent.EventType.COOKING_TIME_UPDATED,
            triggered_by=owner_id,
            data={"previous": previous, "estimated_cooking_time": minutes, "reason": reason},
        )

        order = self._reload(order)
        if notify_customer:
            payload = self._build_payload(order, "cooking_time_updated", reason=reason)
            self._notify_customer(order, payload)
        return order

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_orders_for_owner(self, owner_id, restaurant_id, filters=None) -> dict:
        access_guard.assert_owner_controls_restaurant(owner_id, restaurant_id)
        filters = dict(filters or {})

        page = self._positive_int(filters.pop("page", None), "page", default=1)
        limit = self._positive_int(
            filters.pop("limit", None), "limit", default=order_settings.default_page_size
        )
        if limit > order_settings.max_page_size:
            raise OrderActionError.validation(
                f"limit must be between 1 and {order_settings.max_page_size}"
            )

        filterset = OwnerOrderFilter(
            data=filters,
            queryset=Order.objects.for_restaurant(restaurant_id).with_details(),
        )
        if not filterset.is_valid():
            raise OrderActionError.validation(f"Invalid filters: {dict(filterset.errors)}")

        queryset = filterset.qs
        total_count = queryset.count()
        total_pages = math.ceil(total_count / limit) if total_count else 0
        offset = (page - 1) * limit
        orders = list(queryset[offset:offset + limit])
        self._flag_urgent(orders)

        return {
            "orders": orders,
            "total_count": total_count,
            "current_page": page,
            "total_pages": total_pages,
            "limit": limit,
            "has_next": page < total_pages,
            "has_previous": page > 1,
        }

    def get_order_detail(self, owner_id, order_id) -> Order:
        order = access_guard.assert_owner_controls_order(owner_id, order_id)
        order = self._reload(order)
        self._flag_urgent([order])
        return order

    def get_pending_orders(self, owner_id, restaurant_id) -> list:
        """NEW, CONFIRMED and PREPARING orders, oldest first, flagged when urgent."""
        access_guard.assert_owner_controls_restaurant(owner_id, restaurant_id)
        orders = list(
            Order.objects.for_restaurant(restaurant_id)
            .pending()
            .with_details()
            .order_by("created_at", "id")
        )
        self._flag_urgent(orders)
        return orders

    def get_order_history(self, owner_id, order_id) -> list:
        order = access_guard.assert_owner_controls_order(owner_id, order_id)
        return self.audit_trail.history_for(order.pk)

    def get_order_stats(self, owner_id, restaurant_id, now=None) -> dict:
        access_guard.assert_owner_controls_restaurant(owner_id, restaurant_id)
        return self.stats_aggregator.get_order_stats(restaurant_id, now=now)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _compare_and_set(order, from_status, new_status, **fields):
        updated = Order.objects.compare_and_set_status(order.pk, from_status, new_status, **fields)
        if not updated:
            logger.warning(
                f"Status change {from_status} -> {new_status} lost a race on order {order.pk}"
            )
            raise OrderActionError.conflict(
                "The order status was changed by another request; reload and try again"
            )

    @staticmethod
    def _reload(order) -> Order:
        return Order.objects.with_details().get(pk=order.pk)

    @staticmethod
    def _flag_urgent(orders, now=None):
        now = now or timezone.now()
        threshold = order_settings.urgent_order_minutes
        for order in orders:
            order.urgent = order.is_urgent(threshold, now)

    @staticmethod
    def _positive_int(value, name, default):
        if value in (None, ""):
            return default
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise OrderActionError.validation(f"{name} must be a positive integer")
        if number < 1:
            raise OrderActionError.validation(f"{name} must be a positive integer")
        return number

    def _refund(self, order, label):
        try:
            result = self.refund_coordinator.refund(
                order, order.total_amount, reason=f"Order rejected: {label}"
            )
        except Exception as e:
            logger.error(f"Refund for rejected order {order.pk} raised: {e}", exc_info=True)
            return None
        if not result.success:
            logger.error(f"Refund for rejected order {order.pk} failed: {result.error}")
        return result

    @staticmethod
    def _build_payload(order, event, **extra):
        payload = {
            "event": event,
            "order_id": order.pk,
            "order_number": order.order_number,
            "status": order.status,
            "payment_status": order.payment_status,
            "estimated_cooking_time": order.estimated_cooking_time,
            "updated_at": order.updated_at,
        }
        if order.status == Status.REJECTED:
            payload["rejection_reason"] = order.rejection_reason
            payload["customer_message"] = order.customer_message
        payload.update(extra)
        return payload

    def _notify_owner(self, owner_id, order, payload):
        try:
            self.notification_relay.notify_owner(owner_id, order.restaurant_id, payload)
        except Exception as e:
            logger.error(f"Owner notification for order {order.pk} failed: {e}", exc_info=True)

    def _notify_customer(self, order, payload):
        try:
            self.notification_relay.notify_customer(order.customer_id, payload)
        except Exception as e:
            logger.error(f"Customer notification for order {order.pk} failed: {e}", exc_info=True)


order_lifecycle_service = OrderLifecycleService()
