import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="RefundAttempt",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("payment_key", models.CharField(blank=True, max_length=200)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("reason", models.TextField()),
                (
                    "status",
                    models.CharField(
                        choices=[("SUCCEEDED", "Succeeded"), ("FAILED", "Failed")],
                        max_length=20,
                    ),
                ),
                ("attempts", models.PositiveIntegerField(default=1)),
                ("last_error", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="refund_attempts",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Refund Attempt",
                "verbose_name_plural": "Refund Attempts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "attempts"], name="refund_status_attempts_idx"),
                    models.Index(fields=["order"], name="refund_order_idx"),
                ],
            },
        ),
    ]
