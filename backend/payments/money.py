"""
Monetary precision helpers shared by checkout, the ledgers and the gateway.

Key Principles:
1. NEVER use float for money
2. Always quantize Decimals BEFORE converting to minor units
3. Use ROUND_HALF_EVEN (banker's rounding) to prevent systematic bias
4. The gateway only ever sees integer minor units
"""

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Union

Amount = Union[Decimal, str, int, float]

# Absolute tolerance used when reconciling a client-supplied amount
# against the frozen order total.
AMOUNT_TOLERANCE = Decimal("0.01")

ZERO = Decimal("0.00")

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "CAD": 2,
    "AUD": 2,
    "JPY": 0,
    "KRW": 0,
    "KWD": 3,
    "BHD": 3,
}

CURRENCY_SYMBOLS = {
    "USD": "$",
    "CAD": "$",
    "AUD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def currency_exponent(currency: str) -> int:
    """
    Number of decimal places for a currency. Unknown codes default to 2.

    >>> currency_exponent("usd")
    2
    >>> currency_exponent("JPY")
    0
    """
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize_decimal(currency: str) -> Decimal:
    """Smallest representable unit for a currency, e.g. Decimal('0.01') for USD."""
    return Decimal(10) ** -currency_exponent(currency)


def to_decimal(amount: Amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    if isinstance(amount, float):
        # Go through str() so 0.1 stays 0.1
        amount = str(amount)
    return Decimal(amount)


def quantize(currency: str, amount: Amount) -> Decimal:
    """
    Round to currency decimals using banker's rounding.

    >>> quantize("USD", "10.125")
    Decimal('10.12')
    >>> quantize("USD", "10.127")
    Decimal('10.13')
    """
    return to_decimal(amount).quantize(quantize_decimal(currency), rounding=ROUND_HALF_EVEN)


def to_minor(currency: str, amount: Amount) -> int:
    """
    Convert to minor units (e.g. cents) after quantization.

    >>> to_minor("USD", "20.00")
    2000
    >>> to_minor("JPY", "1234.56")
    1235
    """
    quantized = quantize(currency, amount)
    return int((quantized * (10 ** currency_exponent(currency))).to_integral_value())


def from_minor(currency: str, minor: int) -> Decimal:
    """
    Convert minor units back to a Decimal amount.

    >>> from_minor("USD", 1013)
    Decimal('10.13')
    """
    return quantize(currency, Decimal(minor) / (10 ** currency_exponent(currency)))


def amounts_match(expected: Amount, actual: Amount, tolerance: Decimal = AMOUNT_TOLERANCE) -> bool:
    """
    True when two amounts are within an absolute tolerance of each other.

    >>> amounts_match("20.00", "20.005")
    True
    >>> amounts_match("20.00", "20.02")
    False
    """
    return abs(to_decimal(expected) - to_decimal(actual)) <= tolerance


def format_money(currency: str, amount: Amount) -> str:
    """
    Human-readable amount for messages.

    >>> format_money("USD", "25")
    '$25.00'
    """
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper() + " ")
    exponent = currency_exponent(currency)
    return f"{symbol}{quantize(currency, amount):,.{exponent}f}"
