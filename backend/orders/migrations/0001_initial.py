import uuid
from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


ORDER_STATUS_CHOICES = [
    ("NEW", "New"),
    ("CONFIRMED", "Confirmed"),
    ("PREPARING", "Preparing"),
    ("READY", "Ready"),
    ("COMPLETED", "Completed"),
    ("REJECTED", "Rejected"),
    ("CANCELLED", "Cancelled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("restaurants", "0001_initial"),
        ("customers", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "order_number",
                    models.CharField(
                        blank=True,
                        editable=False,
                        help_text="Human readable number, e.g. ORD-20240115-0001",
                        max_length=20,
                        null=True,
                    ),
                ),
                ("status", models.CharField(choices=ORDER_STATUS_CHOICES, default="NEW", max_length=20)),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("PROCESSING", "Processing"),
                            ("COMPLETED", "Completed"),
                            ("FAILED", "Failed"),
                            ("CANCELLED", "Cancelled"),
                            ("REFUNDED", "Refunded"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("delivery_fee", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("delivery_address", models.JSONField(blank=True, default=dict)),
                ("special_requests", models.TextField(blank=True, default="")),
                (
                    "estimated_cooking_time",
                    models.PositiveIntegerField(blank=True, help_text="Estimated cooking time in minutes", null=True),
                ),
                ("confirmed_at", models.DateTimeField(blank=True, null=True)),
                ("cooking_started_at", models.DateTimeField(blank=True, null=True)),
                ("cooking_completed_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                (
                    "rejection_reason",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("OUT_OF_STOCK", "Out of stock"),
                            ("KITCHEN_BUSY", "Kitchen is too busy"),
                            ("DELIVERY_UNAVAILABLE", "Delivery unavailable"),
                            ("RESTAURANT_CLOSED", "Restaurant closed"),
                            ("SYSTEM_ERROR", "System error"),
                            ("OTHER", "Other"),
                        ],
                        max_length=30,
                        null=True,
                    ),
                ),
                ("rejection_details", models.TextField(blank=True, null=True)),
                ("customer_message", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="customers.customer",
                    ),
                ),
                (
                    "restaurant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="restaurants.restaurant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "ordering": ["-created_at", "order_number"],
                "indexes": [
                    models.Index(fields=["restaurant", "status"], name="order_rest_stat_idx"),
                    models.Index(fields=["restaurant", "created_at"], name="order_rest_created_idx"),
                    models.Index(fields=["restaurant", "payment_status"], name="order_rest_pay_stat_idx"),
                    models.Index(fields=["customer", "status"], name="order_cust_stat_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(order_number__isnull=False),
                        fields=("restaurant", "order_number"),
                        name="unique_order_number_per_restaurant",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("menu_id", models.CharField(blank=True, max_length=64)),
                ("menu_name", models.CharField(max_length=200)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("options", models.JSONField(blank=True, default=list)),
                ("special_requests", models.TextField(blank=True, default="")),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order Item",
                "verbose_name_plural": "Order Items",
                "ordering": ["id"],
                "indexes": [models.Index(fields=["order"], name="orderitem_order_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("from_status", models.CharField(choices=ORDER_STATUS_CHOICES, max_length=20)),
                ("to_status", models.CharField(choices=ORDER_STATUS_CHOICES, max_length=20)),
                ("reason", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_status_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order Status History",
                "verbose_name_plural": "Order Status History",
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["order", "created_at"], name="order_hist_order_dt_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("order.confirmed", "Order confirmed"),
                            ("order.cooking_started", "Cooking started"),
                            ("order.cooking_completed", "Cooking completed"),
                            ("order.delivered", "Order delivered"),
                            ("order.rejected", "Order rejected"),
                            ("order.cancelled", "Order cancelled"),
                            ("order.cooking_time_updated", "Cooking time updated"),
                        ],
                        max_length=40,
                    ),
                ),
                ("data", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="orders.order",
                    ),
                ),
                (
                    "triggered_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["order", "event_type"], name="order_event_type_idx")],
            },
        ),
    ]
