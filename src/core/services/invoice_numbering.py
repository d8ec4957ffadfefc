"""Sequential invoice numbers of the form INV-YYYYMM-NNNN."""

import re
from datetime import datetime

DEFAULT_PREFIX = "INV"

_NUMBER_RE = re.compile(r"^(?P<prefix>[A-Z0-9]+)-(?P<year>\d{4})(?P<month>\d{2})-(?P<seq>\d{4,})$")


def next_invoice_number(
    existing_count: int,
    now: datetime,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """
    Build the number for the next invoice.

    The sequence is existing_count + 1 and is counted over all invoices,
    not reset per month; year and month only come from `now`. Uniqueness is
    enforced by the store, not by this function.
    """
    if existing_count < 0:
        raise ValueError(f"existing_count must be >= 0, got {existing_count}")
    return f"{prefix}-{now.year}{now.month:02d}-{existing_count + 1:04d}"


def parse_invoice_number(invoice_number: str) -> tuple[str, int, int, int]:
    """Split an invoice number into (prefix, year, month, sequence)."""
    match = _NUMBER_RE.match(invoice_number)
    if not match:
        raise ValueError(f"Invalid invoice number: {invoice_number!r}")
    return (
        match.group("prefix"),
        int(match.group("year")),
        int(match.group("month")),
        int(match.group("seq")),
    )
