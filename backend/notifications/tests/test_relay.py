"""
Notification relay tests against the in-memory channel layer.
"""
import asyncio
import uuid
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from notifications.services import (
    NotificationRelay,
    convert_payload_to_str,
    customer_group_name,
    owner_group_name,
)


def subscribe(layer, group):
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(group, channel)
    return channel


class SlowLayer:
    async def group_send(self, group, message):
        await asyncio.sleep(1)


class BrokenLayer:
    async def group_send(self, group, message):
        raise ConnectionError("redis unreachable")


class TestPayloadConversion:
    def test_converts_nested_values(self):
        order_id = uuid.uuid4()
        stamp = datetime(2024, 5, 15, 5, 0, tzinfo=dt_timezone.utc)

        converted = convert_payload_to_str(
            {"order_id": order_id, "total": Decimal("15000.00"), "items": [{"at": stamp}], "n": 3}
        )

        assert converted == {
            "order_id": str(order_id),
            "total": "15000.00",
            "items": [{"at": "2024-05-15T05:00:00+00:00"}],
            "n": 3,
        }


@pytest.mark.django_db
class TestNotificationRelay:
    def test_owner_update_reaches_owner_group(self, owner_user, restaurant):
        layer = get_channel_layer()
        channel = subscribe(layer, owner_group_name(owner_user.pk))

        result = NotificationRelay().notify_owner(
            owner_user.pk, restaurant.pk, {"event": "order_status_changed", "status": "CONFIRMED"}
        )

        assert result.delivered is True
        message = async_to_sync(layer.receive)(channel)
        assert message["type"] == "owner_order_update"
        assert message["data"]["status"] == "CONFIRMED"
        assert message["data"]["restaurant_id"] == str(restaurant.pk)

    def test_customer_update_reaches_customer_group(self, customer):
        layer = get_channel_layer()
        channel = subscribe(layer, customer_group_name(customer.pk))

        result = NotificationRelay().notify_customer(customer.pk, {"status": "REJECTED"})

        assert result.delivered is True
        message = async_to_sync(layer.receive)(channel)
        assert message["type"] == "customer_order_update"
        assert message["data"] == {"status": "REJECTED"}

    def test_opted_out_customer_is_skipped(self, silent_customer):
        result = NotificationRelay().notify_customer(silent_customer.pk, {"status": "CONFIRMED"})

        assert result.delivered is False
        assert result.skipped is True

    def test_slow_channel_layer_times_out(self, owner_user, caplog):
        result = NotificationRelay(channel_layer=SlowLayer(), timeout=0.01).notify_owner(
            owner_user.pk, None, {"status": "CONFIRMED"}
        )

        assert result.delivered is False
        assert result.error == "timeout"
        assert "timed out" in caplog.text

    def test_broken_channel_layer_is_reported(self, owner_user):
        result = NotificationRelay(channel_layer=BrokenLayer()).notify_owner(
            owner_user.pk, None, {"status": "CONFIRMED"}
        )

        assert result.delivered is False
        assert result.error == "redis unreachable"

    def test_missing_channel_layer(self, owner_user):
        with patch("notifications.services.get_channel_layer", return_value=None):
            result = NotificationRelay().notify_owner(owner_user.pk, None, {"status": "CONFIRMED"})

        assert result.delivered is False
        assert result.error == "Channel layer not available"

    def test_timeout_comes_from_settings(self, settings):
        settings.ORDER_MANAGEMENT = {**settings.ORDER_MANAGEMENT, "NOTIFICATION_TIMEOUT_SECONDS": 2}
        assert NotificationRelay().timeout == 2
