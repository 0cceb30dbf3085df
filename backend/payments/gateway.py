"""
Thin wrapper around the Stripe SDK.

Everything the rest of the project needs from Stripe goes through
StripeGateway, which:
- configures the API key, HTTP timeout and SDK retry policy once per process
- converts SDK objects into ProviderIntent values
- converts SDK errors into PaymentProviderError (keeping Stripe's message)
- retries reads (PaymentIntent.retrieve) on connection errors only

Intent creation is never retried so a flaky network can't produce two
charges for one order.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import stripe
from django.conf import settings

from core_backend.config import require_setting
from core_backend.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)

PROVIDER_ERROR_MESSAGE = "Payment processing error"

_configure_lock = threading.Lock()
_configured_with = None


@dataclass
class ProviderIntent:
    """The parts of a Stripe PaymentIntent this project reads."""

    id: str
    status: str
    amount: int
    currency: str
    client_secret: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    last_payment_error: Optional[Any] = None

    @classmethod
    def from_stripe(cls, intent) -> "ProviderIntent":
        metadata = getattr(intent, "metadata", None) or {}
        return cls(
            id=intent.id,
            status=intent.status,
            amount=getattr(intent, "amount", 0),
            currency=getattr(intent, "currency", ""),
            client_secret=getattr(intent, "client_secret", None),
            metadata=dict(metadata),
            last_payment_error=getattr(intent, "last_payment_error", None),
        )

    def summary(self) -> Dict[str, Any]:
        """Slim view returned to the storefront."""
        return {
            "id": self.id,
            "status": self.status,
            "amount": self.amount,
            "currency": self.currency,
        }


def _provider_message(error) -> str:
    return getattr(error, "user_message", None) or str(error) or error.__class__.__name__


def configure_stripe(api_key, timeout):
    """
    Set the SDK's process-wide key, HTTP client and retry policy.

    The settings are global to the stripe module and shared by every thread,
    so they are only replaced when the key or timeout actually changes.
    """
    global _configured_with
    config = (api_key, timeout)
    if _configured_with == config:
        return
    with _configure_lock:
        if _configured_with == config:
            return
        stripe.api_key = api_key
        # Retries are decided by StripeGateway, never inside the SDK
        stripe.max_network_retries = 0
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)
        _configured_with = config
    logger.info(f"[StripeGateway] Configured Stripe client (timeout {timeout}s)")


class StripeGateway:
    """
    Stripe access with the project's timeout and retry policy.

    Usage:
        gateway = StripeGateway()
        intent = gateway.retrieve_intent("pi_123")
    """

    def __init__(self, timeout=None, read_retries=None, retry_backoff=None, sleep=time.sleep):
        self.timeout = timeout if timeout is not None else settings.STRIPE_TIMEOUT_SECONDS
        self.read_retries = max(
            1, read_retries if read_retries is not None else settings.STRIPE_READ_RETRIES
        )
        self.retry_backoff = (
            retry_backoff if retry_backoff is not None else settings.STRIPE_RETRY_BACKOFF_SECONDS
        )
        self._sleep = sleep

    def _configure(self):
        configure_stripe(require_setting("STRIPE_SECRET_KEY"), self.timeout)

    def create_intent(self, *, amount, currency, metadata, description, receipt_email=None) -> ProviderIntent:
        self._configure()
        params = {
            "amount": amount,
            "currency": currency,
            "payment_method_types": ["card"],
            "metadata": metadata,
            "description": description,
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        try:
            intent = stripe.PaymentIntent.create(**params)
        except stripe.StripeError as e:
            logger.error(f"[StripeGateway] PaymentIntent.create failed: {e}")
            raise PaymentProviderError(PROVIDER_ERROR_MESSAGE, details=_provider_message(e))
        return ProviderIntent.from_stripe(intent)

    def retrieve_intent(self, intent_id) -> ProviderIntent:
        self._configure()
        attempt = 0
        while True:
            attempt += 1
            try:
                intent = stripe.PaymentIntent.retrieve(intent_id)
                return ProviderIntent.from_stripe(intent)
            except stripe.APIConnectionError as e:
                if attempt >= self.read_retries:
                    logger.error(
                        f"[StripeGateway] PaymentIntent.retrieve {intent_id} failed after {attempt} attempts: {e}"
                    )
                    raise PaymentProviderError(PROVIDER_ERROR_MESSAGE, details=_provider_message(e))
                delay = self.retry_backoff * attempt
                logger.warning(
                    f"[StripeGateway] Connection error retrieving {intent_id} "
                    f"(attempt {attempt}/{self.read_retries}), retrying in {delay}s"
                )
                self._sleep(delay)
            except stripe.StripeError as e:
                logger.error(f"[StripeGateway] PaymentIntent.retrieve {intent_id} failed: {e}")
                raise PaymentProviderError(PROVIDER_ERROR_MESSAGE, details=_provider_message(e))

    def construct_event(self, payload, sig_header):
        """
        Verify a webhook payload against STRIPE_WEBHOOK_SECRET. Raises
        ValueError for an unreadable payload and stripe.SignatureVerificationError
        for a bad signature.
        """
        secret = require_setting("STRIPE_WEBHOOK_SECRET")
        return stripe.Webhook.construct_event(payload, sig_header, secret)
