"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from src.core.entities.product import Product
from src.infrastructure.clock import FixedClock

FIXED_NOW = datetime(2026, 10, 19, 9, 30, tzinfo=UTC)


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock pinned to 2026-10-19 09:30 UTC."""
    return FixedClock(FIXED_NOW)


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    from src.infrastructure.storage.sqlite.migrations import initialize_database

    results = await initialize_database(temp_db_path, create_backup_before=False)
    assert all(r.success for r in results)
    return temp_db_path


@pytest.fixture
async def sqlite_pool(migrated_db: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Point the global connection pool at the migrated temp database."""
    import src.infrastructure.storage.sqlite.connection as conn_module

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        yield migrated_db
        await conn_module.close_pool()


@pytest.fixture
def sample_product() -> Product:
    """Product P1: price 100.00, five units on hand."""
    return Product(
        id="P1",
        sku="SKU-P1",
        name="Steel Kettle",
        price=Decimal("100.00"),
        cost_price=Decimal("60.00"),
        stock_quantity=5,
    )


@pytest.fixture
def second_product() -> Product:
    """Product P2: price 19.99, ten units on hand."""
    return Product(
        id="P2",
        sku="SKU-P2",
        name="Tea Strainer",
        price=Decimal("19.99"),
        stock_quantity=10,
    )


@pytest.fixture
def db_reader(temp_db_path: Path):
    """Read rows straight from the database file, bypassing the pool."""
    import aiosqlite

    class Reader:
        async def stock(self, product_id: str) -> int:
            async with aiosqlite.connect(temp_db_path) as conn:
                cursor = await conn.execute(
                    "SELECT stock_quantity FROM products WHERE id = ?", (product_id,)
                )
                row = await cursor.fetchone()
                return row[0]

        async def count(self, table: str) -> int:
            async with aiosqlite.connect(temp_db_path) as conn:
                cursor = await conn.execute(f"SELECT COUNT(*) FROM {table}")
                row = await cursor.fetchone()
                return row[0]

        async def invoice_numbers(self) -> list[str]:
            async with aiosqlite.connect(temp_db_path) as conn:
                cursor = await conn.execute(
                    "SELECT invoice_number FROM invoices ORDER BY id"
                )
                return [row[0] for row in await cursor.fetchall()]

    return Reader()
