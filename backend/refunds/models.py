import uuid

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class RefundAttempt(models.Model):
    """
    One refund issued (or tried) for a rejected order.

    FAILED rows are the retry queue: the periodic retry task picks them up
    until they succeed or run out of attempts.
    """

    class Status(models.TextChoices):
        SUCCEEDED = "SUCCEEDED", _("Succeeded")
        FAILED = "FAILED", _("Failed")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        "orders.Order", on_delete=models.PROTECT, related_name="refund_attempts"
    )
    payment_key = models.CharField(max_length=200, blank=True)
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    reason = models.TextField()
    status = models.CharField(max_length=20, choices=Status.choices)
    attempts = models.PositiveIntegerField(default=1)
    last_error = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Refund Attempt")
        verbose_name_plural = _("Refund Attempts")
        indexes = [
            models.Index(fields=["status", "attempts"], name="refund_status_attempts_idx"),
            models.Index(fields=["order"], name="refund_order_idx"),
        ]

    def __str__(self):
        return f"Refund {self.amount} for order {self.order_id} ({self.status})"
