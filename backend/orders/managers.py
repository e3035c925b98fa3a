from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class OrderQuerySet(models.QuerySet):
    """Query helpers for the owner-facing order views."""

    def for_restaurant(self, restaurant_id):
        return self.filter(restaurant_id=restaurant_id)

    def with_status(self, *statuses):
        return self.filter(status__in=statuses)

    def pending(self):
        """Orders the kitchen still has to act on."""
        status = self.model.OrderStatus
        return self.with_status(status.NEW, status.CONFIRMED, status.PREPARING)

    def non_terminal(self):
        status = self.model.OrderStatus
        return self.with_status(
            status.NEW, status.CONFIRMED, status.PREPARING, status.READY
        )

    def urgent(self, minutes, now=None):
        """
        NEW or CONFIRMED orders that have been waiting longer than `minutes`.
        """
        now = now or timezone.now()
        status = self.model.OrderStatus
        return self.with_status(status.NEW, status.CONFIRMED).filter(
            created_at__lt=now - timedelta(minutes=minutes)
        )

    def created_since(self, start):
        return self.filter(created_at__gte=start)

    def with_details(self):
        return self.select_related("customer", "restaurant").prefetch_related(
            "items", "status_history"
        )


class OrderManager(models.Manager.from_queryset(OrderQuerySet)):
    """
    Store contract used by the lifecycle services.

    Status writes go through compare_and_set_status() only: the UPDATE is
    filtered on the status the caller read, so a concurrent writer that got
    there first leaves zero affected rows instead of being overwritten.
    """

    def get_order(self, order_id):
        """Returns the order or None when it does not exist (or the id is malformed)."""
        try:
            return self.get_queryset().select_related("restaurant", "customer").get(pk=order_id)
        except (self.model.DoesNotExist, ValidationError, ValueError):
            return None

    def compare_and_set_status(self, order_id, expected_status, new_status, **fields) -> int:
        """
        UPDATE orders SET status=new_status, ... WHERE id=order_id AND status=expected_status.

        Returns the number of affected rows (0 or 1).
        """
        fields["updated_at"] = timezone.now()
        return (
            self.get_queryset()
            .filter(pk=order_id, status=expected_status)
            .update(status=new_status, **fields)
        )

    def compare_and_set_fields(self, order_id, expected_status, **fields) -> int:
        """
        Updates non-status attributes, guarded on the status the caller read.
        """
        fields["updated_at"] = timezone.now()
        return (
            self.get_queryset()
            .filter(pk=order_id, status=expected_status)
            .update(**fields)
        )
