import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class RestaurantManager(models.Manager):
    def owner_id_for(self, restaurant_id):
        """
        Returns the owner id of a restaurant, or None if the restaurant does not exist.
        """
        try:
            return (
                self.filter(pk=restaurant_id).values_list("owner_id", flat=True).first()
            )
        except (ValidationError, ValueError):
            return None


class Restaurant(models.Model):
    """
    A restaurant listed on the platform. Orders are always scoped to one restaurant,
    and the restaurant's owner is the only user allowed to process them.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="restaurants",
        help_text=_("The owner account that manages this restaurant"),
    )
    name = models.CharField(max_length=200)
    is_open = models.BooleanField(default=True)
    max_concurrent_orders = models.PositiveIntegerField(default=20)
    average_cooking_time = models.PositiveIntegerField(
        default=20, help_text=_("Average cooking time in minutes")
    )

    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RestaurantManager()

    class Meta:
        ordering = ["name"]
        verbose_name = _("Restaurant")
        verbose_name_plural = _("Restaurants")
        indexes = [
            models.Index(fields=["owner"], name="restaurant_owner_idx"),
        ]

    def __str__(self):
        return self.name
