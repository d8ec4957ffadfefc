"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.invoice_numbering import next_invoice_number, parse_invoice_number
from src.core.services.stock_validator import (
    StockReservationValidator,
    ValidatedLine,
    ValidatedLines,
    aggregate_demand,
)
from src.core.services.totals_calculator import InvoiceTotals, compute_totals

__all__ = [
    # Totals
    "compute_totals",
    "InvoiceTotals",
    # Numbering
    "next_invoice_number",
    "parse_invoice_number",
    # Stock validation
    "StockReservationValidator",
    "ValidatedLine",
    "ValidatedLines",
    "aggregate_demand",
]
