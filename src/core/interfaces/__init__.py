"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.catalog import ICatalogAccessor, ICatalogStore
from src.core.interfaces.clock import IClock
from src.core.interfaces.invoice_store import IInvoiceStore, IInvoiceTransaction

__all__ = [
    # Catalog interfaces
    "ICatalogAccessor",
    "ICatalogStore",
    # Invoice storage interfaces
    "IInvoiceStore",
    "IInvoiceTransaction",
    # Time
    "IClock",
]
