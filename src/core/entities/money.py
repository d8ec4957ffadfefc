"""Fixed-point money helpers.

Amounts are Decimals with two places at every boundary and integer cents
everywhere arithmetic happens.
"""

from decimal import ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal("0.01")
_ONE = Decimal("1")


def quantize_money(amount: Decimal | int | float | str) -> Decimal:
    """Round an amount half-up to two decimal places."""
    if isinstance(amount, float):
        # str() keeps the literal the caller typed (0.1, not 0.1000000000000000055)
        amount = str(amount)
    return Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal | int | float | str) -> int:
    """Convert an amount to integer minor units."""
    return int(quantize_money(amount) * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer minor units back to a two-place Decimal."""
    return (Decimal(cents) / 100).quantize(TWO_PLACES)


def round_cents(value: Decimal) -> int:
    """Round a fractional cent value half-up to a whole cent."""
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))
