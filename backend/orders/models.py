import re
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .managers import OrderManager


class Order(models.Model):
    # --- Status Fields ---
    class OrderStatus(models.TextChoices):
        NEW = "NEW", _("New")  # Placed by the customer, waiting for the owner
        CONFIRMED = "CONFIRMED", _("Confirmed")
        PREPARING = "PREPARING", _("Preparing")
        READY = "READY", _("Ready")  # Cooked, waiting for pickup/delivery
        COMPLETED = "COMPLETED", _("Completed")
        REJECTED = "REJECTED", _("Rejected")
        CANCELLED = "CANCELLED", _("Cancelled")  # Cancelled by the customer

    class PaymentStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        PROCESSING = "PROCESSING", _("Processing")
        COMPLETED = "COMPLETED", _("Completed")
        FAILED = "FAILED", _("Failed")
        CANCELLED = "CANCELLED", _("Cancelled")
        REFUNDED = "REFUNDED", _("Refunded")

    class RejectionReason(models.TextChoices):
        OUT_OF_STOCK = "OUT_OF_STOCK", _("Out of stock")
        KITCHEN_BUSY = "KITCHEN_BUSY", _("Kitchen is too busy")
        DELIVERY_UNAVAILABLE = "DELIVERY_UNAVAILABLE", _("Delivery unavailable")
        RESTAURANT_CLOSED = "RESTAURANT_CLOSED", _("Restaurant closed")
        SYSTEM_ERROR = "SYSTEM_ERROR", _("System error")
        OTHER = "OTHER", _("Other")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(
        max_length=20,
        blank=True,
        null=True,
        editable=False,
        help_text=_("Human readable number, e.g. ORD-20240115-0001"),
    )
    restaurant = models.ForeignKey(
        "restaurants.Restaurant", on_delete=models.PROTECT, related_name="orders"
    )
    customer = models.ForeignKey(
        "customers.Customer", on_delete=models.PROTECT, related_name="orders"
    )

    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.NEW
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )

    # --- Financial Fields ---
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    delivery_address = models.JSONField(default=dict, blank=True)
    special_requests = models.TextField(blank=True, default="")
    estimated_cooking_time = models.PositiveIntegerField(
        null=True, blank=True, help_text=_("Estimated cooking time in minutes")
    )

    # --- Lifecycle timestamps (set once, the first time a status is entered) ---
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cooking_started_at = models.DateTimeField(null=True, blank=True)
    cooking_completed_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    # --- Rejection ---
    rejection_reason = models.CharField(
        max_length=30, choices=RejectionReason.choices, blank=True, null=True
    )
    rejection_details = models.TextField(blank=True, null=True)
    customer_message = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderManager()

    class Meta:
        ordering = ["-created_at", "order_number"]
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        indexes = [
            models.Index(fields=["restaurant", "status"], name="order_rest_stat_idx"),
            models.Index(fields=["restaurant", "created_at"], name="order_rest_created_idx"),
            models.Index(fields=["restaurant", "payment_status"], name="order_rest_pay_stat_idx"),
            models.Index(fields=["customer", "status"], name="order_cust_stat_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["restaurant", "order_number"],
                condition=models.Q(order_number__isnull=False),
                name="unique_order_number_per_restaurant",
            ),
        ]

    def __str__(self):
        return f"Order {self.order_number or self.pk} - {self.status}"

    @property
    def rejection(self):
        """Rejection block, or None when the order was not rejected."""
        if self.status != self.OrderStatus.REJECTED:
            return None
        return {
            "reason": self.rejection_reason,
            "details": self.rejection_details,
            "customer_message": self.customer_message,
            "rejected_at": self.rejected_at,
        }

    def minutes_waiting(self, now=None):
        now = now or timezone.now()
        return max((now - self.created_at).total_seconds() / 60, 0)

    def is_urgent(self, threshold_minutes, now=None):
        return (
            self.status in (self.OrderStatus.NEW, self.OrderStatus.CONFIRMED)
            and self.minutes_waiting(now) > threshold_minutes
        )

    def save(self, *args, **kwargs):
        # Generate order_number only if it's not already set
        if not self.order_number:
            max_retries = 5
            for _attempt in range(max_retries):
                try:
                    self.order_number = self._generate_order_number()
                    super().save(*args, **kwargs)
                    break
                except IntegrityError as e:
                    message = str(e).lower()
                    if "duplicate key value" in message or "unique constraint failed" in message:
                        # Another request took the number, retry
                        self.order_number = None
                        continue
                    raise
            else:
                raise IntegrityError(
                    "Failed to generate a unique order number after multiple retries."
                )
        else:
            super().save(*args, **kwargs)

    def _generate_order_number(self):
        """
        Next sequential number for this restaurant and day: ORD-YYYYMMDD-NNNN.
        Every restaurant restarts from 0001 each day.
        """
        day = timezone.localdate(self.created_at or timezone.now())
        prefix = f"ORD-{day:%Y%m%d}-"
        last_order = (
            Order.objects.filter(
                restaurant_id=self.restaurant_id, order_number__startswith=prefix
            )
            .order_by("-order_number")
            .first()
        )

        next_number = 1
        if last_order and last_order.order_number:
            match = re.match(rf"^{re.escape(prefix)}(\d+)$", last_order.order_number)
            if match:
                next_number = int(match.group(1)) + 1

        return f"{prefix}{next_number:04d}"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_id = models.CharField(max_length=64, blank=True)
    menu_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    options = models.JSONField(default=list, blank=True)
    special_requests = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["id"]
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")
        indexes = [
            models.Index(fields=["order"], name="orderitem_order_idx"),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.menu_name}"

    @property
    def total_price(self):
        return self.quantity * self.unit_price


class AppendOnlyError(Exception):
    pass


class OrderStatusHistory(models.Model):
    """
    Append-only audit record of one status transition.
    Rows are written once by the audit trail and never updated or deleted.
    """

    order = models.ForeignKey(
        Order, on_delete=models.CASCADE, related_name="status_history"
    )
    from_status = models.CharField(max_length=20, choices=Order.OrderStatus.choices)
    to_status = models.CharField(max_length=20, choices=Order.OrderStatus.choices)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_status_changes",
    )
    reason = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]
        verbose_name = _("Order Status History")
        verbose_name_plural = _("Order Status History")
        indexes = [
            models.Index(fields=["order", "created_at"], name="order_hist_order_dt_idx"),
        ]

    def __str__(self):
        return f"{self.order_id}: {self.from_status} -> {self.to_status}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AppendOnlyError("Status history entries cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyError("Status history entries cannot be deleted.")


class OrderEvent(models.Model):
    class EventType(models.TextChoices):
        CONFIRMED = "order.confirmed", _("Order confirmed")
        COOKING_STARTED = "order.cooking_started", _("Cooking started")
        COOKING_COMPLETED = "order.cooking_completed", _("Cooking completed")
        DELIVERED = "order.delivered", _("Order delivered")
        REJECTED = "order.rejected", _("Order rejected")
        CANCELLED = "order.cancelled", _("Order cancelled")
        COOKING_TIME_UPDATED = "order.cooking_time_updated", _("Cooking time updated")

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="events")
    event_type = models.CharField(max_length=40, choices=EventType.choices)
    triggered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_events",
    )
    data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["order", "event_type"], name="order_event_type_idx"),
        ]

    def __str__(self):
        return f"{self.event_type} ({self.order_id})"
