"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like owners, restaurants, customers, orders and payments.
"""
import uuid
import pytest
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from customers.models import Customer
from orders.models import Order, OrderItem
from payments.models import Payment
from restaurants.models import Restaurant


# ============================================================================
# OWNER FIXTURES
# ============================================================================

@pytest.fixture
def owner_user(db):
    """Create the owner of `restaurant` and `second_restaurant`"""
    return get_user_model().objects.create_user(
        username='owner_kim',
        email='owner@pizza.example',
        password='password123',
    )


@pytest.fixture
def other_owner(db):
    """Create an owner who owns only `other_restaurant`"""
    return get_user_model().objects.create_user(
        username='owner_lee',
        email='owner@burger.example',
        password='password123',
    )


# ============================================================================
# RESTAURANT FIXTURES
# ============================================================================

@pytest.fixture
def restaurant(owner_user):
    """Create the main test restaurant (Pizza Place)"""
    return Restaurant.objects.create(owner=owner_user, name='Pizza Place')


@pytest.fixture
def second_restaurant(owner_user):
    """Create a second restaurant owned by the same owner"""
    return Restaurant.objects.create(owner=owner_user, name='Pizza Place Annex')


@pytest.fixture
def other_restaurant(other_owner):
    """Create a restaurant owned by another owner (Burger Joint)"""
    return Restaurant.objects.create(owner=other_owner, name='Burger Joint')


# ============================================================================
# CUSTOMER FIXTURES
# ============================================================================

@pytest.fixture
def customer(db):
    """Create sample customer"""
    return Customer.objects.create_customer(
        name='Jane Park',
        email='jane@example.com',
        phone_number='010-1234-5678',
    )


@pytest.fixture
def silent_customer(db):
    """Create a customer who opted out of notifications"""
    return Customer.objects.create_customer(
        name='Quiet Choi',
        preferred_contact_method=Customer.ContactPreference.NONE,
    )


# ============================================================================
# ORDER FIXTURES
# ============================================================================

@pytest.fixture
def order_factory(restaurant, customer):
    """
    Factory fixture for creating orders.

    Usage:
        def test_something(order_factory):
            order = order_factory(status=Order.OrderStatus.CONFIRMED, total_amount=Decimal('15000'))
    """

    def _create_order(items=None, **kwargs):
        kwargs.setdefault('restaurant', restaurant)
        kwargs.setdefault('customer', customer)
        kwargs.setdefault('subtotal', Decimal('15000.00'))
        kwargs.setdefault('total_amount', kwargs['subtotal'])
        kwargs.setdefault('delivery_address', {'street': '12 Teheran-ro', 'city': 'Seoul'})
        order = Order.objects.create(**kwargs)

        for item in items if items is not None else [('Margherita', 1, Decimal('15000.00'))]:
            name, quantity, unit_price = item
            OrderItem.objects.create(
                order=order, menu_name=name, quantity=quantity, unit_price=unit_price
            )
        return order

    return _create_order


@pytest.fixture
def new_order(order_factory):
    """Create a NEW, unpaid order"""
    return order_factory()


@pytest.fixture
def paid_order(order_factory, payment_factory):
    """Create a NEW order whose 15000 payment has completed"""
    order = order_factory(payment_status=Order.PaymentStatus.COMPLETED)
    payment_factory(order)
    return order


@pytest.fixture
def other_restaurant_order(order_factory, other_restaurant):
    """Create a NEW order at another owner's restaurant"""
    return order_factory(restaurant=other_restaurant)


# ============================================================================
# PAYMENT FIXTURES
# ============================================================================

@pytest.fixture
def payment_factory(db):
    """Factory fixture for approved payments"""

    def _create_payment(order, amount=None, **kwargs):
        return Payment.objects.create(
            order=order,
            payment_key=kwargs.pop('payment_key', f'tgen_{uuid.uuid4().hex[:20]}'),
            amount=amount if amount is not None else order.total_amount,
            **kwargs,
        )

    return _create_payment


# ============================================================================
# COLLABORATOR DOUBLES
# ============================================================================

class RecordingRelay:
    """Notification relay double that records every call."""

    def __init__(self):
        self.owner_calls = []
        self.customer_calls = []

    def notify_owner(self, owner_id, restaurant_id, payload):
        self.owner_calls.append((owner_id, restaurant_id, payload))

    def notify_customer(self, customer_id, payload):
        self.customer_calls.append((customer_id, payload))


@pytest.fixture
def recording_relay():
    return RecordingRelay()


@pytest.fixture
def minutes_ago():
    """Returns a helper giving the aware datetime `n` minutes before now."""

    def _minutes_ago(n):
        return timezone.now() - timedelta(minutes=n)

    return _minutes_ago
