"""Decimal arithmetic helpers"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable


def round_decimal(value: Decimal, decimal_places: int = 2) -> Decimal:
    """
    Round a decimal value to specified decimal places.

    Args:
        value: Decimal value to round
        decimal_places: Number of decimal places (default 2)

    Returns:
        Rounded decimal value
    """
    quantize_value = Decimal(10) ** -decimal_places
    return value.quantize(quantize_value, rounding=ROUND_HALF_UP)


def sum_decimals(values: Iterable[Decimal]) -> Decimal:
    """
    Sum decimal values.

    Args:
        values: Decimal values

    Returns:
        Sum of all values
    """
    return sum(values, Decimal("0"))


def format_amount(value: Decimal, currency_symbol: str = "₹") -> str:
    """
    Format an amount for display, dropping a zero fractional part.

    Examples: 100 -> "₹100", 12.5 -> "₹12.50", -3 -> "-₹3"

    Args:
        value: Amount
        currency_symbol: Symbol prefixed to the amount

    Returns:
        Display string
    """
    rounded = round_decimal(value)
    sign = "-" if rounded < 0 else ""
    magnitude = abs(rounded)
    if magnitude == magnitude.to_integral_value():
        text = str(int(magnitude))
    else:
        text = f"{magnitude:.2f}"
    return f"{sign}{currency_symbol}{text}"
