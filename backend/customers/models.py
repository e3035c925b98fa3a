"""
Customer models.
"""
from django.db import models
from django.utils import timezone
import uuid


class CustomerManager(models.Manager):
    """Custom manager for Customer model"""

    def normalize_email(self, email):
        """Normalize email address"""
        if email:
            email = email.strip().lower()
        return email

    def create_customer(self, name, email=None, **extra_fields):
        """Create and return a customer"""
        if not name:
            raise ValueError('Name is required')
        customer = self.model(name=name, email=self.normalize_email(email), **extra_fields)
        customer.save(using=self._db)
        return customer


class Customer(models.Model):
    """
    A platform customer who places delivery orders.
    Only the contact fields the order workflow needs are kept here.
    """

    class ContactPreference(models.TextChoices):
        PUSH = 'push', 'Push Notification'
        SMS = 'sms', 'SMS'
        EMAIL = 'email', 'Email'
        NONE = 'none', 'No Contact'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150, help_text="Customer's display name")
    email = models.EmailField(blank=True, null=True, help_text="Customer's email address")
    phone_number = models.CharField(max_length=20, blank=True, help_text="Customer's phone number")

    preferred_contact_method = models.CharField(
        max_length=10,
        choices=ContactPreference.choices,
        default=ContactPreference.PUSH,
        help_text="Preferred channel for order status updates"
    )
    is_active = models.BooleanField(default=True)

    date_joined = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomerManager()

    class Meta:
        ordering = ['-date_joined']
        indexes = [
            models.Index(fields=['phone_number'], name='customers_c_phone_n_idx'),
            models.Index(fields=['name'], name='customers_c_name_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def wants_notifications(self):
        return self.is_active and self.preferred_contact_method != self.ContactPreference.NONE
