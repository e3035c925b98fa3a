import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)


def convert_payload_to_str(data):
    """
    Recursively converts UUID, Decimal and datetime values to strings.
    This prepares the payload for default JSON serialization by the channels library.
    """
    if isinstance(data, dict):
        return {k: convert_payload_to_str(v) for k, v in data.items()}
    elif isinstance(data, (list, tuple)):
        return [convert_payload_to_str(elem) for elem in data]
    elif isinstance(data, (UUID, Decimal)):
        return str(data)
    elif isinstance(data, (datetime, date)):
        return data.isoformat()
    return data


def owner_group_name(owner_id) -> str:
    return f"owner_{owner_id}_orders"


def customer_group_name(customer_id) -> str:
    return f"customer_{customer_id}_orders"


@dataclass
class NotificationResult:
    delivered: bool
    group: str
    skipped: bool = False
    error: Optional[str] = None


class NotificationRelay:
    """
    Publishes order updates to the channel-layer groups owners and customers
    subscribe to. Delivery is best effort: every call is time-bounded and
    failures are logged and reported in the result, never raised.
    """

    def __init__(self, channel_layer=None, timeout: float = None):
        self._channel_layer = channel_layer
        self._timeout = timeout

    @property
    def channel_layer(self):
        return self._channel_layer or get_channel_layer()

    @property
    def timeout(self):
        if self._timeout is not None:
            return self._timeout
        from orders.config import order_settings

        return order_settings.notification_timeout_seconds

    def notify_owner(self, owner_id, restaurant_id, payload) -> NotificationResult:
        message = dict(payload, restaurant_id=restaurant_id)
        return self._publish(owner_group_name(owner_id), "owner_order_update", message)

    def notify_customer(self, customer_id, payload) -> NotificationResult:
        from customers.models import Customer

        group = customer_group_name(customer_id)
        customer = Customer.objects.filter(pk=customer_id).first()
        if customer is not None and not customer.wants_notifications:
            logger.debug(f"Customer {customer_id} opted out of order notifications")
            return NotificationResult(delivered=False, group=group, skipped=True)
        return self._publish(group, "customer_order_update", payload)

    def _publish(self, group, event_type, payload) -> NotificationResult:
        channel_layer = self.channel_layer
        if not channel_layer:
            logger.warning(f"Channel layer not available. Cannot notify {group}.")
            return NotificationResult(
                delivered=False, group=group, error="Channel layer not available"
            )

        event = {"type": event_type, "data": convert_payload_to_str(payload)}
        timeout = self.timeout

        async def send():
            await asyncio.wait_for(channel_layer.group_send(group, event), timeout)

        try:
            async_to_sync(send)()
        except asyncio.TimeoutError:
            logger.error(f"Notification to {group} timed out after {timeout}s")
            return NotificationResult(delivered=False, group=group, error="timeout")
        except Exception as e:
            logger.error(f"Failed to send notification to {group}: {e}", exc_info=True)
            return NotificationResult(delivered=False, group=group, error=str(e))

        logger.debug(f"Notification {event_type} sent to {group}")
        return NotificationResult(delivered=True, group=group)


notification_relay = NotificationRelay()
