import uuid
from decimal import Decimal

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Payment(models.Model):
    """
    Local record of a payment approved by the payment gateway for an order.
    """

    class PaymentStatus(models.TextChoices):
        DONE = "DONE", _("Done")
        CANCELED = "CANCELED", _("Canceled")
        PARTIAL_CANCELED = "PARTIAL_CANCELED", _("Partially Canceled")
        ABORTED = "ABORTED", _("Aborted")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField(
        "orders.Order", on_delete=models.PROTECT, related_name="payment"
    )
    payment_key = models.CharField(
        max_length=200, unique=True, help_text=_("Gateway-issued payment key")
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.DONE
    )
    cancelled_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    cancel_reason = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        indexes = [
            models.Index(fields=["status"], name="payment_status_idx"),
        ]

    def __str__(self):
        return f"Payment {self.payment_key} ({self.status})"

    @property
    def cancellable_amount(self):
        return self.amount - self.cancelled_amount

    @property
    def is_cancellable(self):
        return (
            self.status in (self.PaymentStatus.DONE, self.PaymentStatus.PARTIAL_CANCELED)
            and self.cancellable_amount > 0
        )
