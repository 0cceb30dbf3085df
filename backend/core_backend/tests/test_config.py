"""
Tests for deployment settings access and the health endpoint.
"""
import pytest
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError

from core_backend.config import (
    get_currency,
    get_max_update_attempts,
    get_tax_rate,
    require_setting,
    transitions_enforced,
)
from core_backend.exceptions import ConfigurationError


class TestRequireSetting:

    def test_returns_value(self):
        assert require_setting("STRIPE_SECRET_KEY") == "sk_test_dummy"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_missing_value(self, settings, value):
        settings.STRIPE_SECRET_KEY = value

        with pytest.raises(ConfigurationError) as exc_info:
            require_setting("STRIPE_SECRET_KEY")

        assert exc_info.value.setting_name == "STRIPE_SECRET_KEY"

    def test_undefined_setting(self):
        with pytest.raises(ConfigurationError):
            require_setting("TOOHOT_SETTING_THAT_DOES_NOT_EXIST")


class TestOrderingSettings:

    def test_tax_rate(self):
        assert get_tax_rate() == Decimal("0.07")

    def test_invalid_tax_rate(self, settings):
        settings.ORDER_TAX_RATE = "seven percent"

        with pytest.raises(ConfigurationError):
            get_tax_rate()

    def test_negative_tax_rate(self, settings):
        settings.ORDER_TAX_RATE = "-0.01"

        with pytest.raises(ConfigurationError):
            get_tax_rate()

    def test_currency_is_lowercase(self, settings):
        settings.ORDER_CURRENCY = "USD"

        assert get_currency() == "usd"

    def test_update_attempts_at_least_one(self, settings):
        settings.ORDER_UPDATE_MAX_ATTEMPTS = 0

        assert get_max_update_attempts() == 1

    def test_transitions_advisory_by_default(self):
        assert transitions_enforced() is False


@pytest.mark.django_db
class TestHealthCheck:

    def test_healthy(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "message": "Backend is running", "database": "ok"}

    def test_database_unreachable(self, client):
        with patch("core_backend.views.connection") as mock_connection:
            mock_connection.cursor.side_effect = DatabaseError("could not connect")
            response = client.get("/api/health")

        assert response.status_code == 503
        assert response.json()["database"] == "unavailable"

    def test_get_only(self, client):
        assert client.post("/api/health").status_code == 405
