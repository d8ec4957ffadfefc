"""SQLite implementation of the product catalog."""

from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.money import from_cents, to_cents
from src.core.entities.product import Product
from src.core.exceptions import (
    DuplicateSkuError,
    InsufficientStockError,
    ProductNotFoundError,
    TransactionFailedError,
)
from src.core.interfaces.catalog import ICatalogAccessor, ICatalogStore
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def _parse_timestamp(value: str | None) -> datetime:
    if value:
        try:
            parsed = datetime.fromisoformat(value)
        except (ValueError, TypeError):
            pass
        else:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(UTC)


def row_to_product(row: aiosqlite.Row) -> Product:
    """Convert a products row to a Product entity."""
    cost_cents = row["cost_price_cents"]
    return Product(
        id=row["id"],
        sku=row["sku"],
        name=row["name"],
        description=row["description"] or "",
        price=from_cents(row["price_cents"]),
        cost_price=from_cents(cost_cents) if cost_cents is not None else None,
        stock_quantity=int(row["stock_quantity"]),
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row["updated_at"]),
    )


class SQLiteCatalogAccessor(ICatalogAccessor):
    """Catalog reads and stock decrements on an already-open connection.

    Used inside invoice transactions so the stock check and the decrement
    share one isolation scope.
    """

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def get_product(self, product_id: str) -> Product | None:
        cursor = await self._conn.execute(
            "SELECT * FROM products WHERE id = ?", (product_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return row_to_product(row)

    async def decrement_stock(self, product_id: str, amount: int) -> Product:
        if amount < 1:
            raise ValueError(f"amount must be >= 1, got {amount}")

        cursor = await self._conn.execute(
            """
            UPDATE products SET
                stock_quantity = stock_quantity - ?,
                updated_at = ?
            WHERE id = ? AND stock_quantity >= ?
            """,
            (amount, datetime.now(UTC).isoformat(), product_id, amount),
        )
        if cursor.rowcount == 0:
            product = await self.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            raise InsufficientStockError(
                product_id=product_id,
                product_name=product.name,
                requested=amount,
                available=product.stock_quantity,
            )

        product = await self.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        logger.debug(
            "stock_decremented",
            product_id=product_id,
            amount=amount,
            remaining=product.stock_quantity,
        )
        return product


class SQLiteCatalogStore(ICatalogStore):
    """SQLite implementation of product persistence."""

    async def create_product(self, product: Product) -> Product:
        """Create a product. Raises DuplicateSkuError on SKU collision."""
        now = datetime.now(UTC)
        product.created_at = now
        product.updated_at = now
        try:
            async with get_transaction() as conn:
                await conn.execute(
                    """
                    INSERT INTO products (
                        id, sku, name, description,
                        price_cents, cost_price_cents, stock_quantity,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        product.id,
                        product.sku,
                        product.name,
                        product.description,
                        to_cents(product.price),
                        to_cents(product.cost_price) if product.cost_price is not None else None,
                        product.stock_quantity,
                        product.created_at.isoformat(),
                        product.updated_at.isoformat(),
                    ),
                )
        except aiosqlite.IntegrityError as e:
            if "products.sku" in str(e):
                raise DuplicateSkuError(product.sku) from e
            raise
        except OverflowError as e:
            logger.error("product_create_failed", sku=product.sku, error=str(e))
            raise TransactionFailedError("create_product", str(e)) from e

        logger.info("product_created", product_id=product.id, sku=product.sku)
        return product

    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""
        async with get_connection() as conn:
            return await SQLiteCatalogAccessor(conn).get_product(product_id)

    async def list_products(
        self, limit: int = 100, offset: int = 0
    ) -> list[Product]:
        """List products, newest first."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM products
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_product(row) for row in rows]
