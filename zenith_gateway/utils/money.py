"""Decimal helpers for monetary values and percentages"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    """
    Convert a raw value to Decimal.

    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.
    None and empty strings count as zero.
    """
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e


def quantize_money(value: Decimal | int | float | str | None) -> Decimal:
    """Round to 2 fractional digits, half up (currency rounding)"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_percentage(value: Decimal | int | float | str | None) -> Decimal:
    """Percentages share the 2-digit scale of money"""
    return quantize_money(value)


def money_str(value: Decimal) -> str:
    """Format for transit: plain decimal string with 2 fractional digits"""
    return f"{quantize_money(value):.2f}"
