"""
Monetary helpers for Stripe-safe calculations.

All amounts that are stored or sent to the payment provider are integers in
minor units (cents). Decimals are only used for intermediate arithmetic and
are quantized BEFORE converting to minor units.

Key Principles:
1. NEVER use float for money
2. Round half away from zero (ROUND_HALF_UP) so that tax on a half cent
   matches what the storefront shows the customer before checkout
3. Prices parsed from display strings are exact ("$15.99" -> 1599)
"""

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
from typing import Union

# Set high precision for intermediate calculations
getcontext().prec = 28

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "CAD": 2,
    "CNY": 2,
    "JPY": 0,
    "KRW": 0,
}

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "$",
    "CNY": "¥",
    "JPY": "¥",
    "KRW": "₩",
}

_DISPLAY_PRICE_RE = re.compile(r"^\s*(?P<sign>-)?\s*[^\d\-.,\s]*\s*(?P<number>[\d,]*\.?\d*)\s*$")


def currency_exponent(currency: str) -> int:
    """
    Get the number of decimal places for a currency.

    Examples:
        >>> currency_exponent("USD")
        2
        >>> currency_exponent("jpy")
        0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    return Decimal(10) ** -currency_exponent(currency)


def quantize(currency: str, amount: Union[Decimal, str, int]) -> Decimal:
    """
    Round to currency decimals, half away from zero.

    Examples:
        >>> quantize("USD", "10.125")
        Decimal('10.13')
        >>> quantize("JPY", "1234.5")
        Decimal('1235')
    """
    if isinstance(amount, float):
        raise TypeError("Money amounts must not be floats")
    return Decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_UP)


def to_minor(currency: str, amount: Union[Decimal, str, int]) -> int:
    """
    Convert a major-unit amount to minor units after quantization.

    Examples:
        >>> to_minor("USD", "15.99")
        1599
        >>> to_minor("USD", "10.125")
        1013
    """
    quantized = quantize(currency, amount)
    exponent = currency_exponent(currency)
    return int((quantized * (10 ** exponent)).to_integral_value())


def from_minor(currency: str, minor: int) -> Decimal:
    """
    Convert from minor units to Decimal (for display).

    Examples:
        >>> from_minor("USD", 1013)
        Decimal('10.13')
    """
    exponent = currency_exponent(currency)
    return Decimal(minor) / (10 ** exponent)


def parse_money(currency: str, display: str) -> int:
    """
    Parse a displayed price such as ``"$15.99"`` into minor units.

    The currency symbol and thousands separators are ignored. Raises
    ValueError for anything that is not a price.

    Examples:
        >>> parse_money("USD", "$15.99")
        1599
        >>> parse_money("USD", "$1,234.50")
        123450
    """
    if not isinstance(display, str):
        raise ValueError(f"Invalid price: {display!r}")
    match = _DISPLAY_PRICE_RE.match(display)
    if not match or not any(ch.isdigit() for ch in match.group("number")):
        raise ValueError(f"Invalid price: {display!r}")
    number = match.group("number").replace(",", "")
    try:
        amount = Decimal(number)
    except InvalidOperation:
        raise ValueError(f"Invalid price: {display!r}")
    if match.group("sign"):
        amount = -amount
    return to_minor(currency, amount)


def calculate_tax(subtotal_minor: int, rate: Union[Decimal, str]) -> int:
    """
    Tax in minor units for a subtotal in minor units, rounded half up.

    Examples:
        >>> calculate_tax(333, "0.0625")
        21
        >>> calculate_tax(2000, "0.0825")
        165
    """
    tax = Decimal(subtotal_minor) * Decimal(str(rate))
    return int(tax.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_money(currency: str, minor: int) -> str:
    """
    Format minor units as human-readable currency string.

    Examples:
        >>> format_money("USD", 1599)
        '$15.99'
        >>> format_money("JPY", 1235)
        '¥1,235'
    """
    amount = from_minor(currency, minor)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper() + " ")
    exponent = currency_exponent(currency)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{exponent}f}"
