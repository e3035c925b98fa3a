import logging

from django.db import transaction
from django.utils import timezone

from orders.models import OrderEvent, OrderStatusHistory

logger = logging.getLogger(__name__)


class AuditTrail:
    """
    Append-only record of order status changes and lifecycle events.

    Writes here happen after the status change has been committed. A failed
    write is logged for operators and never propagated, so the committed
    change stays in place.
    """

    def append(self, order, from_status, to_status, changed_by=None, reason=None, timestamp=None):
        try:
            with transaction.atomic():
                return OrderStatusHistory.objects.create(
                    order=order,
                    from_status=from_status,
                    to_status=to_status,
                    changed_by_id=getattr(changed_by, "pk", changed_by),
                    reason=reason,
                    created_at=timestamp or timezone.now(),
                )
        except Exception as e:
            logger.error(
                f"Failed to record status history for order {order.pk} "
                f"({from_status} -> {to_status}): {e}",
                exc_info=True,
            )
            return None

    def record_event(self, order, event_type, triggered_by=None, data=None):
        try:
            with transaction.atomic():
                return OrderEvent.objects.create(
                    order=order,
                    event_type=event_type,
                    triggered_by_id=getattr(triggered_by, "pk", triggered_by),
                    data=data or {},
                )
        except Exception as e:
            logger.error(
                f"Failed to record event {event_type} for order {order.pk}: {e}",
                exc_info=True,
            )
            return None

    def history_for(self, order_id):
        return list(
            OrderStatusHistory.objects.filter(order_id=order_id)
            .select_related("changed_by")
            .order_by("created_at", "id")
        )


audit_trail = AuditTrail()
