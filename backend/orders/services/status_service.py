import logging

from django.db import DatabaseError, transaction

from core_backend.config import transitions_enforced
from core_backend.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError

from ..models import Order, OrderStatusHistory

logger = logging.getLogger(__name__)


VALID_STATUS_TRANSITIONS = {
    Order.OrderStatus.PENDING: [
        Order.OrderStatus.PAID,
        Order.OrderStatus.CANCELLED,
    ],
    Order.OrderStatus.PAID: [
        Order.OrderStatus.PREPARING,
        Order.OrderStatus.CANCELLED,
    ],
    Order.OrderStatus.PREPARING: [
        Order.OrderStatus.READY,
        Order.OrderStatus.CANCELLED,
    ],
    Order.OrderStatus.READY: [
        Order.OrderStatus.COMPLETED,
    ],
    Order.OrderStatus.COMPLETED: [],
    Order.OrderStatus.CANCELLED: [],
}


def is_valid_transition(current_status, new_status):
    """
    True when ``new_status`` follows ``current_status`` in the kitchen workflow.
    Re-applying the current status is always valid.
    """
    if current_status == new_status:
        return True
    return new_status in VALID_STATUS_TRANSITIONS.get(current_status, [])


class OrderStatusService:
    """
    Administrator-initiated status changes.

    Staff may move an order to any status (e.g. to fix a mistake); jumps that
    skip the workflow are logged as overrides. Set
    ORDERS_ENFORCE_STATUS_TRANSITIONS to reject them instead.
    """

    @staticmethod
    @transaction.atomic
    def update_status(order_id, status, notes=None, expected_version=None) -> Order:
        """
        Set an order's status and, when a note is given, append an audit row.

        Args:
            order_id: Order primary key
            status: One of Order.OrderStatus values
            notes: Optional free text recorded in the status history
            expected_version: Order.version the caller last saw; a mismatch
                means someone else changed the order first

        Returns:
            The updated order re-read from the database with its items.
        """
        if not status:
            raise ValidationError("Order ID and status are required", fields={"status": ["This field is required."]})
        if status not in Order.OrderStatus.values:
            raise ValidationError(
                f"'{status}' is not a valid order status",
                fields={"status": [f"Must be one of: {', '.join(Order.OrderStatus.values)}."]},
            )

        from .order_service import OrderService

        order = OrderService.get_order(order_id)

        if expected_version is not None and int(expected_version) != order.version:
            raise ConflictError(
                f"Order {order.order_number} was modified by someone else (version {order.version}, "
                f"expected {expected_version})"
            )

        previous_status = order.status
        if not is_valid_transition(previous_status, status):
            if transitions_enforced():
                raise InvalidStateError(f"Cannot transition order from {previous_status} to {status}")
            logger.warning(
                f"[OrderStatus] Admin override on {order.order_number}: {previous_status} -> {status}"
            )

        if not Order.objects.compare_and_set(order, status=status):
            raise ConflictError(f"Order {order.order_number} was modified concurrently, please retry")

        logger.info(f"[OrderStatus] {order.order_number}: {previous_status} -> {status}")

        if notes:
            try:
                with transaction.atomic():
                    OrderStatusHistory.objects.create(order=order, status=status, notes=notes)
            except DatabaseError as e:
                logger.error(f"[OrderStatus] Failed to record status note for {order.order_number}: {e}")

        return Order.objects.with_items().get(pk=order.pk)
