"""Decimal money helpers"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert to Decimal without binary float artifacts (0.1 -> Decimal('0.1'))"""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal amount: {value!r}") from e


def quantize_cents(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def floor_cents(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_DOWN)


def commission_for(total_value: Number, rate_percent: Number) -> Decimal:
    """Commission value = total value x rate / 100, rounded to cents"""
    return quantize_cents(to_decimal(total_value) * to_decimal(rate_percent) / Decimal(100))


def format_brl(value: Number) -> str:
    """Format as Brazilian reais: 1234.5 -> 'R$ 1.234,50'"""
    amount = quantize_cents(value)
    sign = "-" if amount < 0 else ""
    integer, cents = f"{abs(amount):,.2f}".split(".")
    return f"{sign}R$ {integer.replace(',', '.')},{cents}"
