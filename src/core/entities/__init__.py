"""Core domain entities."""

from src.core.entities.invoice import (
    DEFAULT_CUSTOMER_NAME,
    DEFAULT_TAX_RATE,
    Invoice,
    InvoiceStatus,
    LineItem,
    LineItemRequest,
)
from src.core.entities.money import from_cents, quantize_money, to_cents
from src.core.entities.product import Product

__all__ = [
    # Invoice
    "Invoice",
    "InvoiceStatus",
    "LineItem",
    "LineItemRequest",
    "DEFAULT_CUSTOMER_NAME",
    "DEFAULT_TAX_RATE",
    # Catalog
    "Product",
    # Money
    "quantize_money",
    "to_cents",
    "from_cents",
]
