"""SQLite-backed catalog and invoice stores sharing one connection pool."""

from src.infrastructure.storage.sqlite.catalog_store import (
    SQLiteCatalogAccessor,
    SQLiteCatalogStore,
)
from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.invoice_store import (
    SQLiteInvoiceStore,
    SQLiteInvoiceTransaction,
)

# Stores hold no state of their own; one instance of each serves every request
_catalog_store: SQLiteCatalogStore | None = None
_invoice_store: SQLiteInvoiceStore | None = None


async def get_catalog_store() -> SQLiteCatalogStore:
    global _catalog_store
    _catalog_store = _catalog_store or SQLiteCatalogStore()
    return _catalog_store


async def get_invoice_store() -> SQLiteInvoiceStore:
    global _invoice_store
    _invoice_store = _invoice_store or SQLiteInvoiceStore()
    return _invoice_store


__all__ = [
    "ConnectionPool",
    "SQLiteCatalogAccessor",
    "SQLiteCatalogStore",
    "SQLiteInvoiceStore",
    "SQLiteInvoiceTransaction",
    "close_pool",
    "get_catalog_store",
    "get_connection",
    "get_invoice_store",
    "get_pool",
    "get_transaction",
]
