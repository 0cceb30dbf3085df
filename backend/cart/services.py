"""
Cart service layer for the storefront's in-progress selection.

This service handles:
- Adding items (prices frozen from the menu's displayed price)
- Updating quantities and removing lines
- Derived totals (item count, subtotal, tax, grand total)
- Persisting the full payload through a CartStore after every mutation

The cart holds no database rows. Prices here are for display only; the
order service recomputes everything from the catalog at checkout.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from core_backend.config import get_currency, get_tax_rate
from core_backend.exceptions import ValidationError
from payments.money import calculate_tax, parse_money

from .storage import CART_SCHEMA_VERSION, CartStore

logger = logging.getLogger(__name__)


@dataclass
class CartItem:
    """One cart line. ``id`` is the menu item's id."""

    id: str
    menu_item: Dict[str, Any]
    quantity: int
    unit_price: int
    total_price: int = field(init=False)

    def __post_init__(self):
        self.total_price = self.unit_price * self.quantity

    def set_quantity(self, quantity: int):
        self.quantity = quantity
        self.total_price = self.unit_price * quantity

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "menuItem": self.menu_item,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalPrice": self.total_price,
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "CartItem":
        """Rebuild a line from a stored payload. Raises ValueError on bad shape."""
        if not isinstance(data, dict):
            raise ValueError("cart line is not an object")
        item_id = data.get("id")
        quantity = data.get("quantity")
        unit_price = data.get("unitPrice")
        menu_item = data.get("menuItem")
        if not isinstance(item_id, str) or not item_id:
            raise ValueError("cart line has no id")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError(f"invalid quantity for {item_id}")
        if isinstance(unit_price, bool) or not isinstance(unit_price, int) or unit_price < 0:
            raise ValueError(f"invalid unit price for {item_id}")
        if not isinstance(menu_item, dict):
            raise ValueError(f"missing menu item snapshot for {item_id}")
        return cls(id=item_id, menu_item=menu_item, quantity=quantity, unit_price=unit_price)


def menu_item_snapshot(menu_item) -> Dict[str, Any]:
    """
    The part of a menu item the cart keeps: id, names and displayed price.
    Accepts a menu.models.MenuItem or a storefront mapping with the same keys.
    """
    if isinstance(menu_item, dict):
        name = menu_item.get("name") or {}
        if isinstance(name, str):
            name = {"en": name, "zh": ""}
        return {
            "id": str(menu_item.get("id") or ""),
            "name": {"en": name.get("en", ""), "zh": name.get("zh", "")},
            "price": menu_item.get("price"),
            "category": menu_item.get("category", ""),
        }
    return {
        "id": str(menu_item.id),
        "name": {"en": menu_item.name_en, "zh": menu_item.name_zh},
        "price": menu_item.display_price,
        "category": menu_item.category,
    }


class Cart:
    """
    Explicit cart state container with an injected persistence port.

    Usage:
        cart = Cart(SessionCartStore(request.session))
        cart.add_item(menu_item, 2)
        cart.grand_total
    """

    def __init__(self, store: CartStore, tax_rate=None, currency: Optional[str] = None):
        self.store = store
        self.tax_rate = tax_rate if tax_rate is not None else get_tax_rate()
        self.currency = currency or get_currency()
        self._items: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        payload = self.store.load()
        if payload is None:
            return []
        try:
            if not isinstance(payload, dict):
                raise ValueError("cart payload is not an object")
            if payload.get("version") != CART_SCHEMA_VERSION:
                raise ValueError(f"unsupported cart payload version {payload.get('version')!r}")
            raw_items = payload.get("items")
            if not isinstance(raw_items, list):
                raise ValueError("cart items is not a list")
            items = [CartItem.from_payload(raw) for raw in raw_items]
        except ValueError as e:
            logger.warning(f"Discarding stored cart: {e}")
            self.store.clear()
            return []
        return items

    def _persist(self):
        self.store.save(self.to_payload())

    def _find(self, item_id) -> Optional[CartItem]:
        item_id = str(item_id)
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def add_item(self, menu_item, quantity: int = 1) -> CartItem:
        """
        Add ``quantity`` of a menu item. An item already in the cart has its
        quantity increased; its frozen unit price is kept.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(
                "Quantity must be a positive integer",
                fields={"quantity": ["Must be at least 1."]},
            )
        snapshot = menu_item_snapshot(menu_item)
        if not snapshot["id"]:
            raise ValidationError("Menu item is required", fields={"menuItemId": ["This field is required."]})

        existing = self._find(snapshot["id"])
        if existing:
            existing.set_quantity(existing.quantity + quantity)
            line = existing
        else:
            try:
                unit_price = parse_money(self.currency, snapshot["price"])
            except ValueError:
                raise ValidationError(f"Invalid price for menu item {snapshot['id']}")
            line = CartItem(id=snapshot["id"], menu_item=snapshot, quantity=quantity, unit_price=unit_price)
            self._items.append(line)
        self._persist()
        return line

    def update_quantity(self, item_id, quantity: int):
        """Set a line's quantity. Zero or less removes the line."""
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError("Quantity must be an integer", fields={"quantity": ["Must be an integer."]})
        if quantity <= 0:
            self.remove_item(item_id)
            return
        line = self._find(item_id)
        if line:
            line.set_quantity(quantity)
            self._persist()

    def remove_item(self, item_id):
        item_id = str(item_id)
        self._items = [item for item in self._items if item.id != item_id]
        self._persist()

    def clear(self):
        self._items = []
        self._persist()

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> int:
        return sum(item.total_price for item in self._items)

    @property
    def tax(self) -> int:
        return calculate_tax(self.subtotal, self.tax_rate)

    @property
    def grand_total(self) -> int:
        return self.subtotal + self.tax

    def to_payload(self) -> Dict[str, Any]:
        return {
            "version": CART_SCHEMA_VERSION,
            "items": [item.to_payload() for item in self._items],
        }

    def to_order_lines(self) -> List[Dict[str, Any]]:
        """Cart lines in the shape accepted by POST /api/orders/create."""
        return [{"menuItemId": item.id, "quantity": item.quantity} for item in self._items]
