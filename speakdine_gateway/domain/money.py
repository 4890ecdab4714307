"""Integer-subunit money contract and fail-fast input validation"""

import math
from decimal import Decimal, InvalidOperation
from typing import NewType
from speakdine_gateway.domain.exceptions import InvalidAmountError, AmountOverflowError

# Smallest currency denomination (paisa for PKR, cents for USD).
# Never mix with major units: 1000.00 PKR == Paisa(100000).
Paisa = NewType("Paisa", int)

# Largest integer a JSON client can round-trip without precision loss
MAX_SAFE_PAISA = 2**53 - 1


def check_bounds(field: str, amount: int) -> Paisa:
    """Reject amounts outside 0..MAX_SAFE_PAISA"""
    if amount < 0:
        raise InvalidAmountError(field, amount, "must not be negative")
    if amount > MAX_SAFE_PAISA:
        raise AmountOverflowError(f"{field} of {amount} exceeds {MAX_SAFE_PAISA} subunits")
    return Paisa(amount)


def to_paisa(value: object, field: str = "amount") -> Paisa:
    """
    Coerce a caller-supplied value into a non-negative integer subunit amount.

    Accepts ints, and floats/Decimals that hold an exact whole number
    (JSON clients send 1500.0 for 1500). Rejects bools, strings, NaN,
    infinities, fractional subunits and negatives.

    Raises:
        InvalidAmountError: value is not a non-negative whole number
        AmountOverflowError: value exceeds MAX_SAFE_PAISA
    """
    if isinstance(value, bool):
        raise InvalidAmountError(field, value, "boolean is not an amount")

    if isinstance(value, int):
        return check_bounds(field, value)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidAmountError(field, value, "must be finite")
        if not value.is_integer():
            raise InvalidAmountError(field, value, "fractional subunits are not allowed")
        return check_bounds(field, int(value))

    if isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidAmountError(field, value, "must be finite")
        if value != value.to_integral_value():
            raise InvalidAmountError(field, value, "fractional subunits are not allowed")
        return check_bounds(field, int(value))

    raise InvalidAmountError(field, value, "must be numeric")


def to_quantity(value: object, field: str = "quantity") -> int:
    """Validate a line-item quantity (positive whole number)"""
    quantity = to_paisa(value, field)
    if quantity < 1:
        raise InvalidAmountError(field, value, "must be at least 1")
    return int(quantity)


def to_percent(value: object, field: str, upper: Decimal = Decimal("100"), inclusive: bool = True) -> Decimal:
    """Validate a percentage rate and return it as an exact Decimal"""
    if isinstance(value, bool):
        raise InvalidAmountError(field, value, "boolean is not a rate")
    if not isinstance(value, (int, float, Decimal)):
        raise InvalidAmountError(field, value, "must be numeric")

    try:
        # str() keeps 2.9 as Decimal("2.9") rather than its binary expansion
        rate = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation as e:
        raise InvalidAmountError(field, value, "must be numeric") from e

    if not rate.is_finite():
        raise InvalidAmountError(field, value, "must be finite")
    if rate < 0:
        raise InvalidAmountError(field, value, "must not be negative")
    if rate > upper or (not inclusive and rate == upper):
        bound = "at most" if inclusive else "below"
        raise InvalidAmountError(field, value, f"must be {bound} {upper}")
    return rate


def format_major_units(amount: int) -> str:
    """Render subunits as a major-unit string for logs: 104120 -> '1041.20'"""
    return f"{amount // 100}.{amount % 100:02d}"
