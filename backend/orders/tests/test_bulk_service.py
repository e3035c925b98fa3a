"""
Bulk Action Tests

A bulk action partitions its input: every order id ends up in exactly one of
success or failed, in the order it was given.
"""
import time
import uuid
from unittest.mock import MagicMock

import pytest

from orders.exceptions import ActionOutcome, ErrorKind, OrderActionError
from orders.models import Order, OrderStatusHistory
from orders.services.bulk_service import BulkActionProcessor
from orders.services.lifecycle_service import OrderLifecycleService

S = Order.OrderStatus


@pytest.fixture
def processor(recording_relay):
    return BulkActionProcessor(
        lifecycle_service=OrderLifecycleService(notification_relay=recording_relay),
        max_workers=1,
    )


def failed_ids(result):
    return [entry["order_id"] for entry in result.failed]


@pytest.mark.django_db
class TestBulkConfirm:
    def test_order_from_sibling_restaurant_fails_alone(
        self, processor, owner_user, restaurant, second_restaurant, order_factory
    ):
        """
        An order of another restaurant, even one the same owner runs, is
        Forbidden while the rest of the batch succeeds.
        """
        o3 = order_factory()
        o4 = order_factory()
        o5 = order_factory(restaurant=second_restaurant)

        result = processor.bulk_order_action(
            owner_user.pk, restaurant.pk, [o3.pk, o4.pk, o5.pk], "confirm"
        )

        assert result.success == [str(o3.pk), str(o4.pk)]
        assert result.failed == [
            {"order_id": str(o5.pk), "reason": "Forbidden", "message": result.failed[0]["message"]}
        ]
        o5.refresh_from_db()
        assert o5.status == S.NEW
        for order in (o3, o4):
            order.refresh_from_db()
            assert order.status == S.CONFIRMED

    def test_foreign_owner_order_is_forbidden(
        self, processor, owner_user, restaurant, new_order, other_restaurant_order
    ):
        result = processor.bulk_order_action(
            owner_user.pk, restaurant.pk, [new_order.pk, other_restaurant_order.pk], "confirm"
        )

        assert result.success == [str(new_order.pk)]
        assert failed_ids(result) == [str(other_restaurant_order.pk)]
        assert result.failed[0]["reason"] == "Forbidden"

    def test_mixed_batch_is_partitioned(self, processor, owner_user, restaurant, order_factory):
        fresh = order_factory()
        ready = order_factory(status=S.READY)
        missing = uuid.uuid4()
        ids = [ready.pk, missing, fresh.pk]

        result = processor.bulk_order_action(owner_user.pk, restaurant.pk, ids, "confirm")

        assert len(result.success) + len(result.failed) == len(ids)
        assert result.success == [str(fresh.pk)]
        assert [(f["order_id"], f["reason"]) for f in result.failed] == [
            (str(ready.pk), "InvalidTransition"),
            (str(missing), "NotFound"),
        ]

    def test_rerunning_confirm_is_idempotent(self, processor, owner_user, restaurant, order_factory):
        orders = [order_factory(), order_factory()]
        ids = [o.pk for o in orders]

        processor.bulk_order_action(owner_user.pk, restaurant.pk, ids, "confirm")
        second = processor.bulk_order_action(owner_user.pk, restaurant.pk, ids, "confirm")

        assert second.success == []
        assert [f["reason"] for f in second.failed] == ["InvalidTransition", "InvalidTransition"]
        assert OrderStatusHistory.objects.filter(order__in=orders).count() == 2

    def test_reason_is_kept_in_status_history(self, processor, owner_user, restaurant, order_factory):
        fresh = order_factory()
        confirmed = order_factory(status=S.CONFIRMED)

        processor.bulk_order_action(
            owner_user.pk, restaurant.pk, [fresh.pk], "confirm", reason="Lunch rush"
        )
        processor.bulk_order_action(
            owner_user.pk, restaurant.pk, [confirmed.pk], "start_cooking", reason="Oven is free"
        )

        assert OrderStatusHistory.objects.get(order=fresh).reason == "Lunch rush"
        assert OrderStatusHistory.objects.get(order=confirmed).reason == "Oven is free"

    def test_result_serializes(self, processor, owner_user, restaurant, new_order):
        result = processor.bulk_order_action(owner_user.pk, restaurant.pk, [new_order.pk], "confirm")
        assert result.to_dict() == {"success": [str(new_order.pk)], "failed": []}


@pytest.mark.django_db
class TestBulkStartCookingAndReject:
    def test_start_cooking_with_cooking_time(self, processor, owner_user, restaurant, order_factory):
        orders = [order_factory(status=S.CONFIRMED), order_factory(status=S.CONFIRMED)]

        result = processor.bulk_order_action(
            owner_user.pk, restaurant.pk, [o.pk for o in orders], "start_cooking", cooking_time=20
        )

        assert len(result.success) == 2
        for order in orders:
            order.refresh_from_db()
            assert order.status == S.PREPARING
            assert order.estimated_cooking_time == 20

    def test_start_cooking_rejects_bad_cooking_time_up_front(self, processor, owner_user, restaurant, new_order):
        with pytest.raises(OrderActionError) as exc_info:
            processor.bulk_order_action(
                owner_user.pk, restaurant.pk, [new_order.pk], "start_cooking", cooking_time=500
            )
        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR

    def test_bulk_reject_defaults(self, processor, owner_user, restaurant, new_order):
        processor.bulk_order_action(owner_user.pk, restaurant.pk, [new_order.pk], "reject")

        new_order.refresh_from_db()
        assert new_order.status == S.REJECTED
        assert new_order.rejection_reason == Order.RejectionReason.OTHER
        assert new_order.rejection_details == "Bulk action"

    def test_bulk_reject_with_reason(self, processor, owner_user, restaurant, new_order):
        processor.bulk_order_action(
            owner_user.pk,
            restaurant.pk,
            [new_order.pk],
            "reject",
            reason="Power outage",
            rejection_reason=Order.RejectionReason.RESTAURANT_CLOSED,
        )

        new_order.refresh_from_db()
        assert new_order.rejection_reason == Order.RejectionReason.RESTAURANT_CLOSED
        assert new_order.rejection_details == "Power outage"

    def test_bulk_reject_skips_cooking_orders(self, processor, owner_user, restaurant, order_factory):
        cooking = order_factory(status=S.PREPARING)

        result = processor.bulk_order_action(owner_user.pk, restaurant.pk, [cooking.pk], "reject")

        assert result.failed[0]["reason"] == "InvalidTransition"


@pytest.mark.django_db
class TestBulkValidation:
    def test_unsupported_action(self, processor, owner_user, restaurant, new_order):
        with pytest.raises(OrderActionError) as exc_info:
            processor.bulk_order_action(owner_user.pk, restaurant.pk, [new_order.pk], "complete")
        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR

    def test_empty_batch(self, processor, owner_user, restaurant):
        with pytest.raises(OrderActionError) as exc_info:
            processor.bulk_order_action(owner_user.pk, restaurant.pk, [], "confirm")
        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR

    def test_batch_size_limit(self, processor, owner_user, restaurant, settings):
        settings.ORDER_MANAGEMENT = {**settings.ORDER_MANAGEMENT, "MAX_BULK_ORDERS": 2}

        with pytest.raises(OrderActionError) as exc_info:
            processor.bulk_order_action(
                owner_user.pk, restaurant.pk, [uuid.uuid4() for _ in range(3)], "confirm"
            )
        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR

    def test_unknown_rejection_reason(self, processor, owner_user, restaurant, new_order):
        with pytest.raises(OrderActionError) as exc_info:
            processor.bulk_order_action(
                owner_user.pk, restaurant.pk, [new_order.pk], "reject", rejection_reason="BORED"
            )
        assert exc_info.value.kind == ErrorKind.VALIDATION_ERROR

    def test_foreign_restaurant_is_forbidden_before_any_work(
        self, processor, other_owner, restaurant, new_order
    ):
        with pytest.raises(OrderActionError) as exc_info:
            processor.bulk_order_action(other_owner.pk, restaurant.pk, [new_order.pk], "confirm")

        assert exc_info.value.kind == ErrorKind.FORBIDDEN
        new_order.refresh_from_db()
        assert new_order.status == S.NEW


@pytest.mark.django_db
class TestBulkFailureIsolation:
    def test_unexpected_error_is_recorded_as_internal(self, owner_user, restaurant, order_factory):
        first = order_factory()
        second = order_factory()
        lifecycle = MagicMock()
        lifecycle.update_status.side_effect = [RuntimeError("kitchen printer offline"), second]

        result = BulkActionProcessor(lifecycle_service=lifecycle, max_workers=1).bulk_order_action(
            owner_user.pk, restaurant.pk, [first.pk, second.pk], "confirm"
        )

        assert result.success == [str(second.pk)]
        assert result.failed == [
            {"order_id": str(first.pk), "reason": "InternalError", "message": "kitchen printer offline"}
        ]

    def test_worker_pool_keeps_input_order(self, owner_user, restaurant, monkeypatch):
        ids = [uuid.uuid4() for _ in range(6)]
        delays = {order_id: 0.03 * (len(ids) - i) for i, order_id in enumerate(ids)}

        def fake_process_one(owner_id, restaurant_id, order_id, action, options):
            time.sleep(delays[order_id])
            if ids.index(order_id) % 2:
                return ActionOutcome.failure(ErrorKind.INVALID_TRANSITION, "nope")
            return ActionOutcome.success()

        processor = BulkActionProcessor(lifecycle_service=MagicMock(), max_workers=4)
        monkeypatch.setattr(processor, "_process_one", fake_process_one)

        result = processor.bulk_order_action(owner_user.pk, restaurant.pk, ids, "confirm")

        assert result.success == [str(ids[0]), str(ids[2]), str(ids[4])]
        assert failed_ids(result) == [str(ids[1]), str(ids[3]), str(ids[5])]
