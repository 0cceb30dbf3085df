"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
from types import SimpleNamespace
from unittest.mock import patch

import pytest


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def ordering_settings(settings):
    """
    Pin ordering and provider settings so tests never depend on the
    developer's environment.
    """
    settings.ORDER_TAX_RATE = "0.07"
    settings.ORDER_NUMBER_PREFIX = "TH"
    settings.ORDER_CURRENCY = "usd"
    settings.ORDERS_ENFORCE_STATUS_TRANSITIONS = False
    settings.ORDER_UPDATE_MAX_ATTEMPTS = 3
    settings.STRIPE_SECRET_KEY = "sk_test_dummy"
    settings.STRIPE_PUBLISHABLE_KEY = "pk_test_dummy"
    settings.STRIPE_WEBHOOK_SECRET = "whsec_dummy"
    settings.STRIPE_READ_RETRIES = 3
    settings.STRIPE_RETRY_BACKOFF_SECONDS = 0
    settings.ANALYTICS_MEASUREMENT_ID = "G-TEST123"
    settings.DEBUG = False
    return settings


@pytest.fixture(autouse=True)
def no_stripe_network():
    """
    Fail loudly if a test reaches Stripe without mocking it.
    """
    with patch("stripe.PaymentIntent.create", side_effect=AssertionError("unmocked Stripe call")), \
            patch("stripe.PaymentIntent.retrieve", side_effect=AssertionError("unmocked Stripe call")):
        yield


# ============================================================================
# API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_menu(api_client):
            response = api_client.get('/api/menu')
            assert response.status_code == 200
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def staff_user(db):
    from django.contrib.auth import get_user_model
    return get_user_model().objects.create_user(
        username="manager", password="not-used", is_staff=True
    )


@pytest.fixture
def staff_client(staff_user):
    """
    API client authenticated as a staff user (back-office endpoints).

    Usage:
        def test_admin_list(staff_client):
            response = staff_client.get('/api/admin/orders')
    """
    from rest_framework.test import APIClient
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# ============================================================================
# MENU AND ORDER FIXTURES
# ============================================================================

@pytest.fixture
def make_menu_item(db):
    """
    Factory for menu items.

    Usage:
        item = make_menu_item(name_en="Mapo Tofu", price_cents=1599)
    """
    from menu.models import MenuItem

    def _make(**kwargs):
        defaults = {
            "name_en": "Dan Dan Noodles",
            "name_zh": "担担面",
            "description_en": "Hand-pulled noodles with chili oil and pork",
            "description_zh": "红油肉末面",
            "price_cents": 1599,
            "category": "Noodles",
            "spice_level": 3,
            "allergens": ["wheat", "peanuts"],
        }
        defaults.update(kwargs)
        return MenuItem.objects.create(**defaults)

    return _make


@pytest.fixture
def menu_item(make_menu_item):
    return make_menu_item()


@pytest.fixture
def customer_payload():
    return {
        "email": "diner@example.com",
        "firstName": "Lin",
        "lastName": "Chen",
        "phone": "555-0100",
    }


@pytest.fixture
def pending_order(menu_item, customer_payload):
    """
    A pending order for 2 x menu_item (2 x $15.99 + 7% tax).
    """
    from orders.services import OrderService
    return OrderService.create_order(
        customer=customer_payload,
        cart_items=[{"menuItemId": str(menu_item.id), "quantity": 2}],
    )


# ============================================================================
# STRIPE FIXTURES
# ============================================================================

@pytest.fixture
def fake_intent():
    """
    Factory for objects shaped like stripe.PaymentIntent.

    Usage:
        intent = fake_intent(status="succeeded", metadata={"orderId": str(order.id)})
    """
    def _make(id="pi_test_123", status="requires_payment_method", amount=3422, currency="usd",
              client_secret=None, metadata=None, last_payment_error=None):
        return SimpleNamespace(
            id=id,
            status=status,
            amount=amount,
            currency=currency,
            client_secret=client_secret or f"{id}_secret_abc",
            metadata=metadata or {},
            last_payment_error=last_payment_error,
        )

    return _make
