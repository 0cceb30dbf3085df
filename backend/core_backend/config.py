"""
Access to deployment settings that must be present before an operation runs.

Provider keys are optional at boot so the menu and cart keep working on a
storefront without payment configured; they are checked here at first use.
"""

from decimal import Decimal

from django.conf import settings

from .exceptions import ConfigurationError


def require_setting(name):
    """Return a non-empty setting or raise ConfigurationError."""
    value = getattr(settings, name, None)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ConfigurationError(name)
    return value


def get_tax_rate():
    rate = getattr(settings, "ORDER_TAX_RATE", Decimal("0.07"))
    try:
        rate = Decimal(str(rate))
    except ArithmeticError:
        raise ConfigurationError("ORDER_TAX_RATE", f"Invalid ORDER_TAX_RATE: {rate!r}")
    if rate < 0:
        raise ConfigurationError("ORDER_TAX_RATE", "ORDER_TAX_RATE must not be negative")
    return rate


def get_currency():
    return str(getattr(settings, "ORDER_CURRENCY", "usd")).lower()


def get_max_update_attempts():
    return max(1, int(getattr(settings, "ORDER_UPDATE_MAX_ATTEMPTS", 3)))


def transitions_enforced():
    return bool(getattr(settings, "ORDERS_ENFORCE_STATUS_TRANSITIONS", False))
