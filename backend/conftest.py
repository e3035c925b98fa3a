"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
import pytest
from django.test import override_settings


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def in_memory_channel_layer():
    """
    Route notifications through the in-memory channel layer.

    Tests never need Redis, even when REDIS_URL is set in the environment.
    """
    with override_settings(
        CHANNEL_LAYERS={'default': {'BACKEND': 'channels.layers.InMemoryChannelLayer'}}
    ):
        yield


@pytest.fixture(autouse=True)
def local_payment_gateway(settings):
    """
    Use the local payment gateway so no test calls a real payment API.
    """
    settings.ORDER_MANAGEMENT = {
        **settings.ORDER_MANAGEMENT,
        'PAYMENT_GATEWAY': 'local',
        'BULK_MAX_WORKERS': 1,
    }
    yield


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/health/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def owner_client(owner_user):
    """
    Provide an API client authenticated as the owner of `restaurant`.

    Usage:
        def test_list(owner_client, restaurant):
            response = owner_client.get(f'/api/owner/restaurants/{restaurant.id}/orders/')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=owner_user)
    return client


@pytest.fixture
def other_owner_client(other_owner):
    """API client authenticated as an owner who owns none of the test restaurants."""
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=other_owner)
    return client


# ============================================================================
# IMPORT ALL FIXTURES FROM core_backend/tests/fixtures.py
# ============================================================================
from core_backend.tests.fixtures import *
