"""
Invoice totals calculation.

All arithmetic happens in integer cents; Decimals only appear at the edges.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from src.core.entities.invoice import DEFAULT_TAX_RATE
from src.core.entities.money import from_cents, round_cents, to_cents


class PricedLine(Protocol):
    unit_price: Decimal
    quantity: int


@dataclass(frozen=True)
class InvoiceTotals:
    """Rounded invoice totals. total_amount == subtotal + tax_amount exactly."""

    subtotal_cents: int
    tax_cents: int

    @property
    def total_cents(self) -> int:
        return self.subtotal_cents + self.tax_cents

    @property
    def subtotal(self) -> Decimal:
        return from_cents(self.subtotal_cents)

    @property
    def tax_amount(self) -> Decimal:
        return from_cents(self.tax_cents)

    @property
    def total_amount(self) -> Decimal:
        return from_cents(self.total_cents)


def line_total_cents(line: PricedLine) -> int:
    return to_cents(line.unit_price) * line.quantity


def compute_totals(
    lines: Iterable[PricedLine],
    tax_rate: Decimal = DEFAULT_TAX_RATE,
) -> InvoiceTotals:
    """
    Compute subtotal, tax and total for a set of priced lines.

    Tax is rounded half-up to the cent once, on the subtotal. An empty
    iterable yields all-zero totals.
    """
    subtotal_cents = sum((line_total_cents(line) for line in lines), 0)
    tax_cents = round_cents(Decimal(subtotal_cents) * tax_rate)
    return InvoiceTotals(subtotal_cents=subtotal_cents, tax_cents=tax_cents)
