"""
Order financial calculator.

Prices always come from the menu catalog; client-submitted unit prices or
totals are never used. All amounts are integer cents.

Usage:
    from orders.calculators import OrderCalculator
    totals = OrderCalculator(tax_rate=Decimal("0.07")).calculate_totals(lines)
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from core_backend.config import get_tax_rate
from payments.money import calculate_tax


@dataclass
class PricedLine:
    menu_item: object
    quantity: int
    unit_price_cents: int
    special_instructions: str = ""

    @property
    def total_price_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@dataclass
class OrderTotals:
    subtotal_cents: int
    tax_cents: int
    total_cents: int


class OrderCalculator:
    """
    Calculates subtotal, tax and total for an order from priced lines.

    Tax is rounded half up to the cent, the same way the storefront rounds
    the tax it displays before checkout.
    """

    def __init__(self, tax_rate: Optional[Decimal] = None):
        self.tax_rate = tax_rate if tax_rate is not None else get_tax_rate()

    @staticmethod
    def price_line(menu_item, quantity: int, special_instructions: str = "") -> PricedLine:
        return PricedLine(
            menu_item=menu_item,
            quantity=quantity,
            unit_price_cents=menu_item.price_cents,
            special_instructions=special_instructions or "",
        )

    def calculate_subtotal(self, lines: List[PricedLine]) -> int:
        return sum(line.total_price_cents for line in lines)

    def calculate_tax(self, subtotal_cents: int) -> int:
        return calculate_tax(subtotal_cents, self.tax_rate)

    def calculate_totals(self, lines: List[PricedLine]) -> OrderTotals:
        subtotal = self.calculate_subtotal(lines)
        tax = self.calculate_tax(subtotal)
        return OrderTotals(subtotal_cents=subtotal, tax_cents=tax, total_cents=subtotal + tax)
