"""
Order status state machine.

The allowed transitions are a fixed table of (from, to) pairs. Everything here
is pure: no database access and no side effects.
"""

from .exceptions import OrderActionError
from .models import Order, OrderEvent

Status = Order.OrderStatus

TRANSITIONS = frozenset(
    {
        (Status.NEW, Status.CONFIRMED),
        (Status.NEW, Status.REJECTED),
        (Status.CONFIRMED, Status.PREPARING),
        (Status.CONFIRMED, Status.REJECTED),
        (Status.PREPARING, Status.READY),
        (Status.READY, Status.COMPLETED),
    }
)

TERMINAL_STATUSES = frozenset({Status.COMPLETED, Status.REJECTED, Status.CANCELLED})

REJECTABLE_STATUSES = frozenset({Status.NEW, Status.CONFIRMED})

# Cooking time may still be adjusted while the kitchen has not finished
COOKING_TIME_EDITABLE_STATUSES = frozenset({Status.NEW, Status.CONFIRMED, Status.PREPARING})

# Timestamp stamped the first time an order enters a status
TIMESTAMP_FIELDS = {
    Status.CONFIRMED: "confirmed_at",
    Status.PREPARING: "cooking_started_at",
    Status.READY: "cooking_completed_at",
    Status.COMPLETED: "delivered_at",
    Status.REJECTED: "rejected_at",
}

EVENT_TYPES = {
    Status.CONFIRMED: OrderEvent.EventType.CONFIRMED,
    Status.PREPARING: OrderEvent.EventType.COOKING_STARTED,
    Status.READY: OrderEvent.EventType.COOKING_COMPLETED,
    Status.COMPLETED: OrderEvent.EventType.DELIVERED,
    Status.REJECTED: OrderEvent.EventType.REJECTED,
    Status.CANCELLED: OrderEvent.EventType.CANCELLED,
}


def can_transition(from_status, to_status) -> bool:
    return (from_status, to_status) in TRANSITIONS


def validate_transition(from_status, to_status) -> None:
    if not can_transition(from_status, to_status):
        raise OrderActionError.invalid_transition(
            f"Cannot change order status from {from_status} to {to_status}"
        )


def next_statuses(status) -> list:
    """Statuses reachable from `status` in one step, in declaration order."""
    return [to for to in Status.values if (status, to) in TRANSITIONS]


def is_terminal(status) -> bool:
    return status in TERMINAL_STATUSES
