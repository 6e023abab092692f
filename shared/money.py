"""Money helpers shared by pricing, coupons and bookings.

All monetary arithmetic uses ``Decimal`` and rounds half-up to the cent.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert ints, floats and strings to Decimal without float artefacts."""

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount, percentage) -> Decimal:
    """Return ``percentage`` percent of ``amount``, rounded to the cent."""

    return round_money(to_decimal(amount) * to_decimal(percentage) / Decimal(100))


def format_money(amount: Optional[Decimal | float | int | str]) -> str:
    """Return a consistently formatted money string with two decimals."""

    if amount is None:
        return "0.00"

    return f"{round_money(amount)}"
