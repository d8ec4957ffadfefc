"""
Dependency injection container for FastAPI.

Provides store and use case instances to route handlers.
"""

from functools import lru_cache

from src.application.use_cases import CreateInvoiceUseCase
from src.config import Settings, get_settings
from src.infrastructure.storage.sqlite import (
    SQLiteCatalogStore,
    SQLiteInvoiceStore,
    get_catalog_store,
    get_invoice_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


async def get_product_store() -> SQLiteCatalogStore:
    """Get catalog store."""
    return await get_catalog_store()


async def get_inv_store() -> SQLiteInvoiceStore:
    """Get invoice store."""
    return await get_invoice_store()


def get_create_invoice_use_case() -> CreateInvoiceUseCase:
    """Get create invoice use case."""
    return CreateInvoiceUseCase(invoicing=get_app_settings().invoicing)
