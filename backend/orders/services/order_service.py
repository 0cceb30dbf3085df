import logging
import uuid
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import DatabaseError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core_backend.exceptions import NotFoundError, PersistenceError, ValidationError
from menu.services import MenuService

from ..calculators import OrderCalculator
from ..models import Order, OrderItem, OrderStatusHistory
from ..numbering import next_order_number

logger = logging.getLogger(__name__)


def _clean_text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _menu_item_reference(line: Dict[str, Any]) -> Optional[str]:
    """A cart line references the catalog by ``menuItemId`` or a nested ``menuItem.id``."""
    reference = line.get("menuItemId")
    if not reference and isinstance(line.get("menuItem"), dict):
        reference = line["menuItem"].get("id")
    if not reference:
        return None
    try:
        # Hex, braced and upper-case ids all name the same catalog row
        return str(uuid.UUID(str(reference)))
    except ValueError:
        return str(reference)


class OrderService:
    """
    Creation and lookup of storefront orders.
    """

    @staticmethod
    def _validate_customer(customer) -> Dict[str, str]:
        email = _clean_text(customer.get("email"))
        first_name = _clean_text(customer.get("firstName"))
        last_name = _clean_text(customer.get("lastName"))

        missing = {
            field: ["This field is required."]
            for field, value in (("email", email), ("firstName", first_name), ("lastName", last_name))
            if not value
        }
        if missing:
            raise ValidationError(
                "Customer email, first name, and last name are required",
                fields={f"customer.{field}": errors for field, errors in missing.items()},
            )
        try:
            validate_email(email)
        except DjangoValidationError:
            raise ValidationError(
                "Customer email is invalid",
                fields={"customer.email": ["Enter a valid email address."]},
            )
        return {
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "phone": _clean_text(customer.get("phone")),
        }

    @staticmethod
    def _validate_cart_lines(cart_items) -> List[Dict[str, Any]]:
        lines = []
        for index, line in enumerate(cart_items):
            if not isinstance(line, dict):
                raise ValidationError("Invalid cart items", fields={f"cartItems[{index}]": ["Must be an object."]})
            quantity = line.get("quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                raise ValidationError(
                    "Invalid cart items",
                    details=f"Quantity must be a positive integer (line {index + 1})",
                    fields={f"cartItems[{index}].quantity": ["Must be a positive integer."]},
                )
            reference = _menu_item_reference(line)
            if not reference:
                raise ValidationError(
                    "Invalid cart items",
                    details=f"Menu item reference is missing (line {index + 1})",
                    fields={f"cartItems[{index}].menuItemId": ["This field is required."]},
                )
            lines.append({
                "menu_item_id": reference,
                "quantity": quantity,
                "special_instructions": _clean_text(line.get("specialInstructions")),
            })
        return lines

    @staticmethod
    def _parse_pickup_time(pickup_time):
        if not pickup_time:
            return None
        try:
            # parse_datetime raises ValueError for well-formed but impossible dates
            parsed = parse_datetime(pickup_time) if isinstance(pickup_time, str) else None
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError(
                "Invalid pickup time",
                fields={"pickupTime": ["Use an ISO 8601 date and time."]},
            )
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed)
        return parsed

    @staticmethod
    def create_order(customer, cart_items, pickup_time=None, pickup_notes=None) -> Order:
        """
        Create a pending order from a customer snapshot and cart lines.

        Prices are looked up in the menu catalog; unit prices and totals sent
        by the client are ignored. The order header and its items are written
        in one transaction, so nothing is persisted if any insert fails.

        Args:
            customer: {"email", "firstName", "lastName", "phone"?}
            cart_items: [{"menuItemId" | "menuItem": {"id"}, "quantity", "specialInstructions"?}]
            pickup_time: optional ISO 8601 string
            pickup_notes: optional free text

        Returns:
            The created Order with its items prefetched.

        Raises:
            ValidationError: missing customer fields, empty cart, bad quantity,
                missing/unknown/unavailable menu item
            PersistenceError: the database rejected the write
        """
        if not isinstance(customer, dict) or not cart_items or not isinstance(cart_items, list):
            raise ValidationError("Customer information and cart items are required")

        customer_data = OrderService._validate_customer(customer)
        requested_lines = OrderService._validate_cart_lines(cart_items)
        pickup_at = OrderService._parse_pickup_time(pickup_time)

        catalog = MenuService.get_items_by_ids(line["menu_item_id"] for line in requested_lines)
        calculator = OrderCalculator()
        priced_lines = []
        for index, line in enumerate(requested_lines):
            menu_item = catalog.get(line["menu_item_id"])
            if menu_item is None:
                raise ValidationError(
                    f"Menu item not found: {line['menu_item_id']}",
                    fields={f"cartItems[{index}].menuItemId": ["Unknown menu item."]},
                )
            if not menu_item.is_available:
                raise ValidationError(
                    f"Menu item is not available: {menu_item.name_en}",
                    fields={f"cartItems[{index}].menuItemId": ["Not available."]},
                )
            priced_lines.append(
                calculator.price_line(menu_item, line["quantity"], line["special_instructions"])
            )

        totals = calculator.calculate_totals(priced_lines)

        try:
            with transaction.atomic():
                order = Order.objects.create(
                    order_number=next_order_number(),
                    subtotal_cents=totals.subtotal_cents,
                    tax_cents=totals.tax_cents,
                    total_cents=totals.total_cents,
                    customer_email=customer_data["email"],
                    customer_first_name=customer_data["first_name"],
                    customer_last_name=customer_data["last_name"],
                    customer_phone=customer_data["phone"],
                    pickup_time=pickup_at,
                    pickup_notes=_clean_text(pickup_notes),
                )
                OrderItem.objects.bulk_create([
                    OrderItem(
                        order=order,
                        menu_item=line.menu_item,
                        menu_item_name_en=line.menu_item.name_en,
                        menu_item_name_zh=line.menu_item.name_zh,
                        menu_item_description_en=line.menu_item.description_en,
                        menu_item_description_zh=line.menu_item.description_zh,
                        quantity=line.quantity,
                        unit_price_cents=line.unit_price_cents,
                        total_price_cents=line.total_price_cents,
                        special_instructions=line.special_instructions,
                    )
                    for line in priced_lines
                ])
        except DatabaseError as e:
            logger.error(f"[CreateOrder] Failed to save order for {customer_data['email']}: {e}")
            raise PersistenceError("Failed to create order", details=str(e))

        logger.info(
            f"[CreateOrder] Created order {order.order_number} ({order.id}): "
            f"{len(priced_lines)} lines, total {order.total_cents} cents"
        )
        return Order.objects.with_items().get(pk=order.pk)

    @staticmethod
    def get_order(order_id) -> Order:
        """Order with its items. Malformed ids are treated as not found."""
        try:
            order_uuid = uuid.UUID(str(order_id))
        except (TypeError, ValueError, AttributeError):
            raise NotFoundError("Order not found")
        order = Order.objects.with_items().filter(pk=order_uuid).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    @staticmethod
    def get_order_by_number(order_number) -> Order:
        order = Order.objects.with_items().filter(order_number=order_number).first()
        if order is None:
            raise NotFoundError("Order not found")
        return order

    @staticmethod
    def list_customer_orders(email):
        """Orders placed with ``email`` (case-insensitive), newest first."""
        email = _clean_text(email)
        if not email:
            return Order.objects.none()
        return Order.objects.with_items().filter(customer_email__iexact=email).order_by("-created_at")

    @staticmethod
    def list_status_history(order_id):
        """Status history of an order, newest first."""
        order = OrderService.get_order(order_id)
        return OrderStatusHistory.objects.filter(order=order).order_by("-created_at", "-id")
