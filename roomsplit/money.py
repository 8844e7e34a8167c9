"""Two-decimal money helpers.

Amounts travel as floats at the API edge and are converted to Decimal for
arithmetic so that rounding is half-up and repeatable.
"""

import math
from decimal import Decimal, ROUND_HALF_UP

from roomsplit.errors import InvalidInput

CENT = Decimal("0.01")


def to_decimal(value, field: str = "amount") -> Decimal:
    """Convert a numeric input to Decimal, rejecting NaN and infinities."""
    if value is None:
        raise InvalidInput(f"{field} is required")
    if isinstance(value, bool):
        raise InvalidInput(f"{field} must be a number")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidInput(f"{field} must be a finite number")
        return value
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidInput(f"{field} must be a finite number")
    try:
        # str() keeps 0.1 as 0.1 instead of its binary expansion
        result = Decimal(str(value))
    except (ArithmeticError, ValueError):
        raise InvalidInput(f"{field} must be a number")
    if not result.is_finite():
        raise InvalidInput(f"{field} must be a finite number")
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def as_float(value: Decimal) -> float:
    return float(round_money(value))


def to_money(value, field: str = "amount") -> Decimal:
    """Convert an amount that must already carry at most two decimals."""
    result = to_decimal(value, field)
    if result != round_money(result):
        raise InvalidInput(f"{field} must have at most 2 decimal places")
    return result
