"""
Payment services linking storefront orders to Stripe PaymentIntents.

- PaymentIntentService: obtains a client secret for a pending order,
  reusing the order's existing intent while it still awaits a card
- PaymentConfirmationService: reconciles an intent's state onto its order,
  used by POST /api/payment/confirm and by the Stripe webhook
"""

import logging

from core_backend.config import get_currency, get_max_update_attempts
from core_backend.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PaymentProviderError,
    ValidationError,
)
from orders.models import Order
from orders.services import OrderService

from .gateway import StripeGateway

logger = logging.getLogger(__name__)

# Intent states in which the client secret can still be used to collect a card
REUSABLE_INTENT_STATUSES = ("requires_payment_method", "requires_confirmation")

AWAITING_CUSTOMER_STATUSES = ("requires_payment_method", "requires_confirmation", "requires_action")

# Order statuses that already reflect a captured payment
FULFILMENT_STATUSES = ("paid", "preparing", "ready", "completed")


def map_intent_status(intent):
    """
    (order status, payment status) for a provider intent.

    ``succeeded`` wins over a pending or cancelled order: the money has
    been taken and the kitchen needs to see the order.
    """
    if intent.status == "succeeded":
        return Order.OrderStatus.PAID, Order.PaymentStatus.SUCCEEDED
    if intent.status in AWAITING_CUSTOMER_STATUSES:
        if intent.last_payment_error:
            return Order.OrderStatus.PENDING, Order.PaymentStatus.FAILED
        return Order.OrderStatus.PENDING, Order.PaymentStatus.PENDING
    if intent.status == "processing":
        return Order.OrderStatus.PENDING, Order.PaymentStatus.PENDING
    if intent.status == "canceled":
        return Order.OrderStatus.CANCELLED, Order.PaymentStatus.CANCELLED
    return Order.OrderStatus.PENDING, Order.PaymentStatus.FAILED


class PaymentIntentService:
    """
    Creates (or reuses) the Stripe PaymentIntent for an order.
    """

    def __init__(self, gateway=None):
        self.gateway = gateway or StripeGateway()

    def _reusable_intent(self, order):
        if not order.stripe_payment_intent_id:
            return None
        try:
            existing = self.gateway.retrieve_intent(order.stripe_payment_intent_id)
        except PaymentProviderError as e:
            logger.warning(
                f"[CreatePaymentIntent] Existing intent {order.stripe_payment_intent_id} for "
                f"{order.order_number} could not be retrieved, creating a new one: {e.details}"
            )
            return None
        if existing.status in REUSABLE_INTENT_STATUSES:
            return existing
        logger.info(
            f"[CreatePaymentIntent] Existing intent {existing.id} is {existing.status}, creating a new one"
        )
        return None

    def _link_intent(self, order, intent_id):
        """Store the intent id on the order, re-reading it if someone else wrote first."""
        for _ in range(get_max_update_attempts()):
            if Order.objects.compare_and_set(
                order,
                stripe_payment_intent_id=intent_id,
                payment_status=Order.PaymentStatus.PENDING,
            ):
                return order
            order = OrderService.get_order(order.pk)
            if order.status != Order.OrderStatus.PENDING or order.payment_status == Order.PaymentStatus.SUCCEEDED:
                raise InvalidStateError("Order is not available for payment")
        raise ConflictError(f"Could not link payment to order {order.order_number}, please retry")

    def create_payment_intent(self, order_id):
        """
        Returns ``{"clientSecret", "paymentIntentId"}`` for a pending order.

        Raises:
            ValidationError: no order id
            NotFoundError: unknown order
            InvalidStateError: order is not pending
            PaymentProviderError: Stripe rejected the request
        """
        if not order_id:
            raise ValidationError("Order ID is required", fields={"orderId": ["This field is required."]})

        order = OrderService.get_order(order_id)
        if order.status != Order.OrderStatus.PENDING or order.payment_status == Order.PaymentStatus.SUCCEEDED:
            raise InvalidStateError("Order is not available for payment")

        existing = self._reusable_intent(order)
        if existing:
            logger.info(f"[CreatePaymentIntent] Reusing intent {existing.id} for {order.order_number}")
            return {"clientSecret": existing.client_secret, "paymentIntentId": existing.id}

        intent = self.gateway.create_intent(
            amount=order.total_cents,
            currency=get_currency(),
            metadata={
                "orderId": str(order.id),
                "orderNumber": order.order_number,
                "customerEmail": order.customer_email,
            },
            description=f"TooHot Order {order.order_number}",
            receipt_email=order.customer_email,
        )
        self._link_intent(order, intent.id)
        logger.info(
            f"[CreatePaymentIntent] Created intent {intent.id} for {order.order_number} "
            f"({order.total_cents} {get_currency()})"
        )
        return {"clientSecret": intent.client_secret, "paymentIntentId": intent.id}


class PaymentConfirmationService:
    """
    Applies a Stripe PaymentIntent's state to the order named in its metadata.
    """

    def __init__(self, gateway=None):
        self.gateway = gateway or StripeGateway()

    def confirm_payment(self, payment_intent_id):
        """
        Retrieve the intent from Stripe and update its order.

        Returns:
            (order, intent summary dict)
        """
        if not payment_intent_id:
            raise ValidationError(
                "Payment Intent ID is required", fields={"paymentIntentId": ["This field is required."]}
            )
        intent = self.gateway.retrieve_intent(payment_intent_id)
        return self.apply_intent(intent)

    @staticmethod
    def _changes_for(order, intent):
        """
        Field updates that bring ``order`` in line with ``intent``, or None when
        the order must be left alone.

        A captured payment is never undone: once the order's payment has
        succeeded, intents in any other state (a superseded intent being
        cancelled, an out-of-date read) are ignored, and a succeeded intent
        does not pull an order the kitchen is working on back to paid.
        """
        order_status, payment_status = map_intent_status(intent)
        if order.payment_status == Order.PaymentStatus.SUCCEEDED:
            if payment_status != Order.PaymentStatus.SUCCEEDED:
                return None
            if order.status in FULFILMENT_STATUSES:
                order_status = order.status
        changes = {
            "status": order_status,
            "payment_status": payment_status,
            "stripe_payment_intent_id": intent.id,
        }
        if payment_status == Order.PaymentStatus.SUCCEEDED:
            changes["payment_method"] = "card"
        return changes

    def apply_intent(self, intent):
        order_id = intent.metadata.get("orderId")
        if not order_id:
            raise ValidationError("Order ID not found in payment intent")

        attempts = get_max_update_attempts()
        for attempt in range(1, attempts + 1):
            try:
                order = OrderService.get_order(order_id)
            except NotFoundError:
                logger.warning(f"[ConfirmPayment] Intent {intent.id} references unknown order {order_id}")
                raise
            changes = self._changes_for(order, intent)
            if changes is None:
                logger.warning(
                    f"[ConfirmPayment] {order.order_number} is already paid "
                    f"(intent {order.stripe_payment_intent_id}), ignoring intent {intent.id} in state {intent.status}"
                )
                return order, intent.summary()
            if Order.objects.compare_and_set(order, **changes):
                logger.info(
                    f"[ConfirmPayment] {order.order_number}: intent {intent.id} is {intent.status}, "
                    f"order {changes['status']}/{changes['payment_status']}"
                )
                return OrderService.get_order(order.pk), intent.summary()
            logger.warning(
                f"[ConfirmPayment] Concurrent update on {order.order_number} "
                f"(attempt {attempt}/{attempts}), re-reading"
            )
        raise ConflictError(f"Order {order_id} kept changing while confirming payment, please retry")
