import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List

from django.db import connection

from orders.config import order_settings
from orders.exceptions import ActionOutcome, OrderActionError
from orders.models import Order

from .access_guard import access_guard
from .lifecycle_service import (
    OrderLifecycleService,
    order_lifecycle_service as default_lifecycle_service,
    validate_cooking_time,
)

logger = logging.getLogger(__name__)

CONFIRM = "confirm"
START_COOKING = "start_cooking"
REJECT = "reject"
SUPPORTED_ACTIONS = (CONFIRM, START_COOKING, REJECT)

DEFAULT_BULK_REJECT_DETAIL = "Bulk action"


@dataclass
class BulkActionResult:
    success: List[str] = field(default_factory=list)
    failed: List[dict] = field(default_factory=list)

    def to_dict(self):
        return {"success": list(self.success), "failed": list(self.failed)}


class BulkActionProcessor:
    """
    Applies one action to many orders of a single restaurant.

    Each order is its own unit of work: a failure is recorded against that
    order and the rest of the batch carries on. Results are reported in input
    order whether the batch runs sequentially or on a worker pool.
    """

    def __init__(self, lifecycle_service: OrderLifecycleService = None, max_workers: int = None):
        self.lifecycle_service = lifecycle_service or default_lifecycle_service
        self._max_workers = max_workers

    @property
    def max_workers(self) -> int:
        return max(self._max_workers or order_settings.bulk_max_workers, 1)

    def bulk_order_action(
        self,
        owner_id,
        restaurant_id,
        order_ids,
        action,
        reason=None,
        cooking_time=None,
        rejection_reason=Order.RejectionReason.OTHER,
    ) -> BulkActionResult:
        access_guard.assert_owner_controls_restaurant(owner_id, restaurant_id)

        if action not in SUPPORTED_ACTIONS:
            raise OrderActionError.validation(
                f"Unsupported bulk action '{action}'. Use one of: {', '.join(SUPPORTED_ACTIONS)}"
            )
        order_ids = list(order_ids or [])
        if not order_ids:
            raise OrderActionError.validation("At least one order id is required")
        max_orders = order_settings.max_bulk_orders
        if len(order_ids) > max_orders:
            raise OrderActionError.validation(
                f"A bulk action can process at most {max_orders} orders"
            )
        if action == REJECT and rejection_reason not in Order.RejectionReason.values:
            raise OrderActionError.validation(f"Unknown rejection reason: {rejection_reason}")
        if action == START_COOKING and cooking_time is not None:
            cooking_time = validate_cooking_time(cooking_time)

        options = {
            "reason": reason,
            "cooking_time": cooking_time,
            "rejection_reason": rejection_reason,
        }

        workers = min(self.max_workers, len(order_ids))
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(
                    executor.map(
                        lambda order_id: self._process_in_worker(
                            owner_id, restaurant_id, order_id, action, options
                        ),
                        order_ids,
                    )
                )
        else:
            outcomes = [
                self._process_one(owner_id, restaurant_id, order_id, action, options)
                for order_id in order_ids
            ]

        result = BulkActionResult()
        for order_id, outcome in zip(order_ids, outcomes):
            if outcome.ok:
                result.success.append(str(order_id))
            else:
                result.failed.append(
                    {
                        "order_id": str(order_id),
                        "reason": outcome.error_kind.value,
                        "message": outcome.message,
                    }
                )

        logger.info(
            f"Bulk {action} on restaurant {restaurant_id} by owner {owner_id}: "
            f"{len(result.success)} succeeded, {len(result.failed)} failed"
        )
        return result

    def _process_in_worker(self, owner_id, restaurant_id, order_id, action, options) -> ActionOutcome:
        try:
            return self._process_one(owner_id, restaurant_id, order_id, action, options)
        finally:
            # Worker threads hold their own DB connection
            connection.close()

    def _process_one(self, owner_id, restaurant_id, order_id, action, options) -> ActionOutcome:
        return ActionOutcome.capture(
            lambda: self._apply(owner_id, restaurant_id, order_id, action, options)
        )

    def _apply(self, owner_id, restaurant_id, order_id, action, options):
        order = Order.objects.get_order(order_id)
        if order is None:
            raise OrderActionError.not_found(f"Order {order_id} not found")
        access_guard.assert_order_in_restaurant(order, restaurant_id)

        service = self.lifecycle_service
        if action == CONFIRM:
            return service.update_status(
                owner_id, order.pk, Order.OrderStatus.CONFIRMED, memo=options["reason"]
            )
        if action == START_COOKING:
            return service.update_status(
                owner_id,
                order.pk,
                Order.OrderStatus.PREPARING,
                cooking_time=options["cooking_time"],
                memo=options["reason"],
            )
        return service.reject_order(
            owner_id,
            order.pk,
            options["rejection_reason"],
            detail_reason=options["reason"] or DEFAULT_BULK_REJECT_DETAIL,
        )


bulk_action_processor = BulkActionProcessor()
