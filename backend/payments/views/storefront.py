"""
Storefront payment views (no authentication).

The storefront creates a PaymentIntent for a pending order, collects the
card with Stripe Elements, then asks us to confirm the result.
"""

import logging

from django.conf import settings

from cart.views import get_session_cart
from core_backend.base import BaseAPIView
from core_backend.config import get_currency
from orders.models import Order
from orders.serializers import OrderSerializer

from ..services import PaymentConfirmationService, PaymentIntentService

logger = logging.getLogger(__name__)


class CreatePaymentIntentView(BaseAPIView):
    """
    POST /api/payment/create-intent  {orderId}
    """

    def post(self, request):
        order_id = request.data.get("orderId") if isinstance(request.data, dict) else None
        logger.info(f"[CreatePaymentIntent] Request for order {order_id}")
        result = PaymentIntentService().create_payment_intent(order_id)
        return self.create_success_response({"success": True, **result})


class ConfirmPaymentView(BaseAPIView):
    """
    POST /api/payment/confirm  {paymentIntentId}

    A successful payment also empties the visitor's session cart.
    """

    def post(self, request):
        payment_intent_id = request.data.get("paymentIntentId") if isinstance(request.data, dict) else None
        order, intent = PaymentConfirmationService().confirm_payment(payment_intent_id)

        if order.payment_status == Order.PaymentStatus.SUCCEEDED:
            get_session_cart(request).clear()

        return self.create_success_response(
            {"success": True, "order": OrderSerializer(order).data, "paymentIntent": intent}
        )


class PaymentConfigView(BaseAPIView):
    """
    GET /api/payment/config

    Public keys the storefront needs to boot Stripe Elements and analytics.
    """

    def get(self, request):
        return self.create_success_response({
            "publishableKey": settings.STRIPE_PUBLISHABLE_KEY,
            "analyticsMeasurementId": settings.ANALYTICS_MEASUREMENT_ID,
            "currency": get_currency(),
        })
