"""
Monetary precision helpers for gateway calls.

Amounts are stored as Decimal and sent to the gateway in minor units.
Quantize before converting so every caller rounds the same way.
"""

from decimal import Decimal, ROUND_HALF_EVEN
from typing import Union

# Currency minor unit exponents (how many decimal places)
CURRENCY_EXPONENT = {
    "KRW": 0,  # South Korean Won (no subunit)
    "JPY": 0,
    "USD": 2,
    "EUR": 2,
}


def currency_exponent(currency: str) -> int:
    return CURRENCY_EXPONENT.get(currency.upper(), 2)


def quantize(currency: str, amount: Union[Decimal, str, int, float]) -> Decimal:
    """
    Round to currency decimals using banker's rounding (ROUND_HALF_EVEN).

        >>> quantize("KRW", "15000.4")
        Decimal('15000')
        >>> quantize("USD", "10.125")
        Decimal('10.12')
    """
    if isinstance(amount, float):
        amount = str(amount)
    step = Decimal(10) ** -currency_exponent(currency)
    return Decimal(amount).quantize(step, rounding=ROUND_HALF_EVEN)


def to_minor(currency: str, amount: Union[Decimal, str, int, float]) -> int:
    """
        >>> to_minor("KRW", Decimal("15000.00"))
        15000
        >>> to_minor("USD", "10.127")
        1013
    """
    quantized = quantize(currency, amount)
    return int((quantized * (10 ** currency_exponent(currency))).to_integral_value())
