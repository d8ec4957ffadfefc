"""Pytest fixtures for SQLite storage tests."""

from pathlib import Path

import pytest

from src.core.entities.product import Product
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from src.infrastructure.storage.sqlite.invoice_store import SQLiteInvoiceStore


@pytest.fixture
def catalog_store(sqlite_pool: Path) -> SQLiteCatalogStore:
    return SQLiteCatalogStore()


@pytest.fixture
def invoice_store(sqlite_pool: Path) -> SQLiteInvoiceStore:
    return SQLiteInvoiceStore()


@pytest.fixture
async def stocked_catalog(
    catalog_store: SQLiteCatalogStore,
    sample_product: Product,
    second_product: Product,
) -> SQLiteCatalogStore:
    """Catalog holding P1 (stock 5) and P2 (stock 10)."""
    await catalog_store.create_product(sample_product)
    await catalog_store.create_product(second_product)
    return catalog_store
