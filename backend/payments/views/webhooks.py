"""
Stripe webhook endpoint.

Stripe reports PaymentIntent state changes here as well, so an order is
marked paid even when the customer closes the tab before the storefront
calls /api/payment/confirm.

Stripe does not deliver events in order. The event only names the intent;
its current state is always re-read from Stripe before touching the order.
"""

import logging

import stripe
from django.http import HttpResponse
from django.utils.decorators import method_decorator
from django.views.decorators.csrf import csrf_exempt
from rest_framework.permissions import AllowAny

from core_backend.base import BaseAPIView
from core_backend.exceptions import NotFoundError, PaymentProviderError, ValidationError

from ..gateway import StripeGateway
from ..services import PaymentConfirmationService

logger = logging.getLogger(__name__)

HANDLED_EVENTS = (
    "payment_intent.succeeded",
    "payment_intent.payment_failed",
    "payment_intent.canceled",
    "payment_intent.processing",
)


@method_decorator(csrf_exempt, name="dispatch")
class StripeWebhookView(BaseAPIView):
    """
    POST /api/payment/webhook

    Verifies the Stripe signature, then reconciles the order named in the
    intent's metadata with the intent's current state.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        gateway = StripeGateway()
        payload = request.body
        sig_header = request.META.get("HTTP_STRIPE_SIGNATURE")

        try:
            event = gateway.construct_event(payload, sig_header)
        except ValueError as e:
            # Invalid payload
            logger.error(f"Stripe webhook: Invalid payload - {e}")
            return HttpResponse(status=400)
        except stripe.SignatureVerificationError as e:
            # Invalid signature
            logger.error(f"Stripe webhook: Invalid signature - {e}")
            return HttpResponse(status=400)

        event_type = event["type"]
        if event_type not in HANDLED_EVENTS:
            logger.info(f"Stripe webhook: Ignoring event type {event_type}")
            return HttpResponse(status=200)

        event_object = event["data"]["object"]
        intent_id = event_object.get("id") if isinstance(event_object, dict) else getattr(event_object, "id", None)
        try:
            order, intent = PaymentConfirmationService(gateway=gateway).confirm_payment(intent_id)
        except (ValidationError, NotFoundError) as e:
            # Not ours (e.g. an intent created from the Stripe dashboard); acknowledge so Stripe stops retrying
            logger.warning(f"Stripe webhook: {event_type} for {intent_id} not applied: {e.message}")
            return HttpResponse(status=200)
        except PaymentProviderError as e:
            # Stripe redelivers on any non-2xx answer
            logger.error(f"Stripe webhook: could not re-read {intent_id} for {event_type}: {e.details}")
            return HttpResponse(status=503)

        logger.info(
            f"Stripe webhook: {event_type} for {intent_id} reconciled {order.order_number} "
            f"(intent is {intent['status']})"
        )
        return HttpResponse(status=200)
