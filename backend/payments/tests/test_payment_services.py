"""
Payment Service Tests

Tests for linking orders to Stripe PaymentIntents:
- Intent creation and reuse
- Precondition on order status
- Confirmation state mapping
- Optimistic concurrency on confirmation
"""
import pytest
from unittest.mock import MagicMock, patch

from core_backend.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PaymentProviderError,
    ValidationError,
)
from orders.models import Order
from payments.gateway import ProviderIntent
from payments.services import (
    PaymentConfirmationService,
    PaymentIntentService,
    map_intent_status,
)


def provider_intent(**kwargs):
    defaults = {"id": "pi_test_123", "status": "requires_payment_method", "amount": 3422,
                "currency": "usd", "client_secret": "pi_test_123_secret"}
    defaults.update(kwargs)
    return ProviderIntent(**defaults)


@pytest.fixture
def gateway():
    return MagicMock()


@pytest.mark.django_db
class TestCreatePaymentIntent:
    """Test PaymentIntentService.create_payment_intent"""

    def test_creates_intent_and_links_it(self, gateway, pending_order):
        """Test a new intent is created for the order total and stored on the order"""
        gateway.create_intent.return_value = provider_intent(id="pi_new", client_secret="pi_new_secret")

        result = PaymentIntentService(gateway).create_payment_intent(str(pending_order.id))

        assert result == {"clientSecret": "pi_new_secret", "paymentIntentId": "pi_new"}
        kwargs = gateway.create_intent.call_args.kwargs
        assert kwargs["amount"] == pending_order.total_cents == 3422
        assert kwargs["currency"] == "usd"
        assert kwargs["metadata"] == {
            "orderId": str(pending_order.id),
            "orderNumber": pending_order.order_number,
            "customerEmail": "diner@example.com",
        }
        assert kwargs["description"] == f"TooHot Order {pending_order.order_number}"
        assert kwargs["receipt_email"] == "diner@example.com"

        pending_order.refresh_from_db()
        assert pending_order.stripe_payment_intent_id == "pi_new"
        assert pending_order.version == 1

    def test_reuses_intent_awaiting_payment_method(self, gateway, pending_order):
        """Test calling twice returns the same intent without creating a second one"""
        gateway.create_intent.return_value = provider_intent(id="pi_first", client_secret="secret_1")
        service = PaymentIntentService(gateway)

        first = service.create_payment_intent(pending_order.id)
        gateway.retrieve_intent.return_value = provider_intent(
            id="pi_first", status="requires_payment_method", client_secret="secret_1"
        )
        second = service.create_payment_intent(pending_order.id)

        assert first["paymentIntentId"] == second["paymentIntentId"] == "pi_first"
        assert second["clientSecret"] == "secret_1"
        assert gateway.create_intent.call_count == 1
        gateway.retrieve_intent.assert_called_once_with("pi_first")

    def test_reuses_intent_awaiting_confirmation(self, gateway, pending_order):
        Order.objects.filter(pk=pending_order.pk).update(stripe_payment_intent_id="pi_old")
        gateway.retrieve_intent.return_value = provider_intent(id="pi_old", status="requires_confirmation")

        result = PaymentIntentService(gateway).create_payment_intent(pending_order.id)

        assert result["paymentIntentId"] == "pi_old"
        gateway.create_intent.assert_not_called()

    def test_creates_new_intent_when_existing_is_not_reusable(self, gateway, pending_order):
        Order.objects.filter(pk=pending_order.pk).update(stripe_payment_intent_id="pi_old")
        gateway.retrieve_intent.return_value = provider_intent(id="pi_old", status="canceled")
        gateway.create_intent.return_value = provider_intent(id="pi_fresh")

        result = PaymentIntentService(gateway).create_payment_intent(pending_order.id)

        assert result["paymentIntentId"] == "pi_fresh"

    def test_retrieval_error_falls_back_to_new_intent(self, gateway, pending_order):
        """Test an unreadable existing intent is logged and replaced"""
        Order.objects.filter(pk=pending_order.pk).update(stripe_payment_intent_id="pi_gone")
        gateway.retrieve_intent.side_effect = PaymentProviderError(details="No such payment_intent")
        gateway.create_intent.return_value = provider_intent(id="pi_fresh")

        result = PaymentIntentService(gateway).create_payment_intent(pending_order.id)

        assert result["paymentIntentId"] == "pi_fresh"
        pending_order.refresh_from_db()
        assert pending_order.stripe_payment_intent_id == "pi_fresh"

    def test_paid_order_is_not_available_for_payment(self, gateway, pending_order):
        Order.objects.filter(pk=pending_order.pk).update(status=Order.OrderStatus.PAID)

        with pytest.raises(InvalidStateError) as exc_info:
            PaymentIntentService(gateway).create_payment_intent(pending_order.id)

        assert exc_info.value.message == "Order is not available for payment"
        gateway.create_intent.assert_not_called()

    def test_pending_order_with_captured_payment_is_not_charged_again(self, gateway, pending_order):
        """Test an order whose payment already succeeded never gets a second intent"""
        Order.objects.filter(pk=pending_order.pk).update(
            payment_status=Order.PaymentStatus.SUCCEEDED, stripe_payment_intent_id="pi_paid"
        )

        with pytest.raises(InvalidStateError):
            PaymentIntentService(gateway).create_payment_intent(pending_order.id)

        gateway.retrieve_intent.assert_not_called()
        gateway.create_intent.assert_not_called()

    def test_unknown_order(self, gateway, db):
        with pytest.raises(NotFoundError):
            PaymentIntentService(gateway).create_payment_intent("4b1f0a52-9a43-4d5e-9d7b-6f1f5a3c2e10")

    def test_missing_order_id(self, gateway, db):
        with pytest.raises(ValidationError):
            PaymentIntentService(gateway).create_payment_intent(None)

    def test_provider_error_propagates(self, gateway, pending_order):
        gateway.create_intent.side_effect = PaymentProviderError(details="Invalid API Key provided")

        with pytest.raises(PaymentProviderError):
            PaymentIntentService(gateway).create_payment_intent(pending_order.id)

        pending_order.refresh_from_db()
        assert pending_order.stripe_payment_intent_id == ""

    def test_link_retries_after_concurrent_update(self, gateway, pending_order):
        """Test a concurrent write before linking is re-read, not overwritten blindly"""
        gateway.create_intent.return_value = provider_intent(id="pi_new")
        original = Order.objects.compare_and_set

        calls = {"count": 0}

        def racing_compare_and_set(order, **changes):
            calls["count"] += 1
            if calls["count"] == 1:
                # Another request bumps the version first
                Order.objects.filter(pk=order.pk).update(pickup_notes="call on arrival", version=order.version + 1)
            return original(order, **changes)

        with patch.object(Order.objects, "compare_and_set", side_effect=racing_compare_and_set):
            PaymentIntentService(gateway).create_payment_intent(pending_order.id)

        pending_order.refresh_from_db()
        assert pending_order.stripe_payment_intent_id == "pi_new"
        assert pending_order.pickup_notes == "call on arrival"
        assert calls["count"] == 2


class TestMapIntentStatus:
    """Provider status to (order status, payment status)"""

    @pytest.mark.parametrize("status,error,expected", [
        ("succeeded", None, ("paid", "succeeded")),
        ("requires_payment_method", None, ("pending", "pending")),
        ("requires_confirmation", None, ("pending", "pending")),
        ("requires_action", None, ("pending", "pending")),
        ("requires_payment_method", {"message": "Your card was declined."}, ("pending", "failed")),
        ("processing", None, ("pending", "pending")),
        ("canceled", None, ("cancelled", "cancelled")),
        ("requires_capture", None, ("pending", "failed")),
    ])
    def test_mapping(self, status, error, expected):
        intent = provider_intent(status=status, last_payment_error=error)
        assert map_intent_status(intent) == expected


@pytest.mark.django_db
class TestConfirmPayment:
    """Test PaymentConfirmationService"""

    def test_succeeded_marks_order_paid(self, gateway, pending_order):
        gateway.retrieve_intent.return_value = provider_intent(
            id="pi_ok", status="succeeded", metadata={"orderId": str(pending_order.id)}
        )

        order, intent = PaymentConfirmationService(gateway).confirm_payment("pi_ok")

        assert order.status == Order.OrderStatus.PAID
        assert order.payment_status == Order.PaymentStatus.SUCCEEDED
        assert order.stripe_payment_intent_id == "pi_ok"
        assert order.payment_method == "card"
        assert intent == {"id": "pi_ok", "status": "succeeded", "amount": 3422, "currency": "usd"}

    def test_succeeded_overrides_cancelled_order(self, gateway, pending_order):
        """Test a captured payment wins over a prior cancellation"""
        Order.objects.filter(pk=pending_order.pk).update(
            status=Order.OrderStatus.CANCELLED, payment_status=Order.PaymentStatus.CANCELLED
        )
        gateway.retrieve_intent.return_value = provider_intent(
            status="succeeded", metadata={"orderId": str(pending_order.id)}
        )

        order, _ = PaymentConfirmationService(gateway).confirm_payment("pi_test_123")

        assert order.status == Order.OrderStatus.PAID
        assert order.payment_status == Order.PaymentStatus.SUCCEEDED

    def test_declined_card_marks_payment_failed(self, gateway, pending_order):
        gateway.retrieve_intent.return_value = provider_intent(
            status="requires_payment_method",
            last_payment_error={"message": "Your card was declined."},
            metadata={"orderId": str(pending_order.id)},
        )

        order, _ = PaymentConfirmationService(gateway).confirm_payment("pi_test_123")

        assert order.status == Order.OrderStatus.PENDING
        assert order.payment_status == Order.PaymentStatus.FAILED

    def test_canceled_intent_cancels_order(self, gateway, pending_order):
        gateway.retrieve_intent.return_value = provider_intent(
            status="canceled", metadata={"orderId": str(pending_order.id)}
        )

        order, _ = PaymentConfirmationService(gateway).confirm_payment("pi_test_123")

        assert order.status == Order.OrderStatus.CANCELLED
        assert order.payment_status == Order.PaymentStatus.CANCELLED

    def test_missing_order_metadata(self, gateway, db):
        gateway.retrieve_intent.return_value = provider_intent(status="succeeded", metadata={})

        with pytest.raises(ValidationError) as exc_info:
            PaymentConfirmationService(gateway).confirm_payment("pi_test_123")

        assert exc_info.value.message == "Order ID not found in payment intent"

    def test_unknown_order(self, gateway, db):
        gateway.retrieve_intent.return_value = provider_intent(
            status="succeeded", metadata={"orderId": "4b1f0a52-9a43-4d5e-9d7b-6f1f5a3c2e10"}
        )

        with pytest.raises(NotFoundError):
            PaymentConfirmationService(gateway).confirm_payment("pi_test_123")

    def test_missing_payment_intent_id(self, gateway, db):
        with pytest.raises(ValidationError):
            PaymentConfirmationService(gateway).confirm_payment("")

        gateway.retrieve_intent.assert_not_called()

    def test_retries_lost_race_then_applies(self, gateway, pending_order):
        gateway.retrieve_intent.return_value = provider_intent(
            status="succeeded", metadata={"orderId": str(pending_order.id)}
        )

        with patch.object(Order.objects, "compare_and_set", side_effect=[False, True]) as mock_cas:
            PaymentConfirmationService(gateway).confirm_payment("pi_test_123")

        assert mock_cas.call_count == 2

    def test_conflict_after_max_attempts(self, gateway, pending_order, settings):
        settings.ORDER_UPDATE_MAX_ATTEMPTS = 3
        gateway.retrieve_intent.return_value = provider_intent(
            status="succeeded", metadata={"orderId": str(pending_order.id)}
        )

        with patch.object(Order.objects, "compare_and_set", return_value=False) as mock_cas:
            with pytest.raises(ConflictError):
                PaymentConfirmationService(gateway).confirm_payment("pi_test_123")

        assert mock_cas.call_count == 3


@pytest.mark.django_db
class TestCapturedPaymentIsFinal:
    """Test that reconciling an intent never undoes a captured payment"""

    def mark_paid(self, order, status=Order.OrderStatus.PAID):
        Order.objects.filter(pk=order.pk).update(
            status=status,
            payment_status=Order.PaymentStatus.SUCCEEDED,
            stripe_payment_intent_id="pi_paid",
            payment_method="card",
        )

    @pytest.mark.parametrize("intent_status,error", [
        ("processing", None),
        ("requires_payment_method", {"message": "Your card was declined."}),
        ("canceled", None),
    ])
    def test_other_intent_states_are_ignored(self, gateway, pending_order, intent_status, error):
        self.mark_paid(pending_order, status=Order.OrderStatus.PREPARING)
        gateway.retrieve_intent.return_value = provider_intent(
            id="pi_superseded", status=intent_status, last_payment_error=error,
            metadata={"orderId": str(pending_order.id)},
        )

        order, intent = PaymentConfirmationService(gateway).confirm_payment("pi_superseded")

        assert order.status == Order.OrderStatus.PREPARING
        assert order.payment_status == Order.PaymentStatus.SUCCEEDED
        assert order.stripe_payment_intent_id == "pi_paid"
        assert intent["status"] == intent_status
        pending_order.refresh_from_db()
        assert pending_order.version == 0

    def test_succeeded_again_keeps_kitchen_status(self, gateway, pending_order):
        self.mark_paid(pending_order, status=Order.OrderStatus.READY)
        gateway.retrieve_intent.return_value = provider_intent(
            id="pi_paid", status="succeeded", metadata={"orderId": str(pending_order.id)}
        )

        order, _ = PaymentConfirmationService(gateway).confirm_payment("pi_paid")

        assert order.status == Order.OrderStatus.READY
        assert order.payment_status == Order.PaymentStatus.SUCCEEDED
