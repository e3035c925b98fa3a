import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Customer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(help_text="Customer's display name", max_length=150)),
                ("email", models.EmailField(blank=True, help_text="Customer's email address", max_length=254, null=True)),
                ("phone_number", models.CharField(blank=True, help_text="Customer's phone number", max_length=20)),
                (
                    "preferred_contact_method",
                    models.CharField(
                        choices=[("push", "Push Notification"), ("sms", "SMS"), ("email", "Email"), ("none", "No Contact")],
                        default="push",
                        help_text="Preferred channel for order status updates",
                        max_length=10,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-date_joined"],
                "indexes": [
                    models.Index(fields=["phone_number"], name="customers_c_phone_n_idx"),
                    models.Index(fields=["name"], name="customers_c_name_idx"),
                ],
            },
        ),
    ]
