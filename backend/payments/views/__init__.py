"""
Payment views package.

- storefront.py: intent creation, confirmation and public config
- webhooks.py: Stripe webhook handler
"""

from .storefront import ConfirmPaymentView, CreatePaymentIntentView, PaymentConfigView
from .webhooks import StripeWebhookView

__all__ = [
    "ConfirmPaymentView",
    "CreatePaymentIntentView",
    "PaymentConfigView",
    "StripeWebhookView",
]
