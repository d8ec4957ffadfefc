"""SQLite implementation of invoice storage."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.invoice import Invoice, InvoiceStatus, LineItem
from src.core.entities.money import from_cents, to_cents
from src.core.exceptions import InvoiceNumberConflictError, TransactionFailedError
from src.core.interfaces.invoice_store import IInvoiceStore, IInvoiceTransaction
from src.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogAccessor
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteInvoiceTransaction(SQLiteCatalogAccessor, IInvoiceTransaction):
    """Invoice unit of work on one connection holding the write lock."""

    async def count_invoices(self) -> int:
        cursor = await self._conn.execute("SELECT COUNT(*) FROM invoices")
        row = await cursor.fetchone()
        return int(row[0])

    async def add_invoice(self, invoice: Invoice) -> Invoice:
        try:
            cursor = await self._conn.execute(
                """
                INSERT INTO invoices (
                    invoice_number, customer_name, status,
                    subtotal_cents, tax_rate, tax_cents, total_cents,
                    payment_method, issued_at, notes
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice.invoice_number,
                    invoice.customer_name,
                    invoice.status.value,
                    to_cents(invoice.subtotal),
                    str(invoice.tax_rate),
                    to_cents(invoice.tax_amount),
                    to_cents(invoice.total_amount),
                    invoice.payment_method,
                    invoice.issued_at.isoformat(),
                    invoice.notes,
                ),
            )
        except aiosqlite.IntegrityError as e:
            # A failed statement does not end the transaction
            if "invoices.invoice_number" in str(e):
                raise InvoiceNumberConflictError(invoice.invoice_number) from e
            raise
        invoice.id = cursor.lastrowid

        for item in invoice.line_items:
            item.invoice_id = invoice.id
            item_cursor = await self._conn.execute(
                """
                INSERT INTO invoice_line_items (
                    invoice_id, product_id, product_name, product_sku,
                    quantity, unit_price_cents, line_total_cents
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.invoice_id,
                    item.product_id,
                    item.product_name,
                    item.product_sku,
                    item.quantity,
                    to_cents(item.unit_price),
                    to_cents(item.line_total),
                ),
            )
            item.id = item_cursor.lastrowid

        return invoice


class SQLiteInvoiceStore(IInvoiceStore):
    """SQLite implementation of invoice storage."""

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLiteInvoiceTransaction]:
        """Open a BEGIN IMMEDIATE transaction for one invoice creation."""
        try:
            async with get_transaction() as conn:
                yield SQLiteInvoiceTransaction(conn)
        except (aiosqlite.Error, OverflowError) as e:
            # OverflowError: a cents amount does not fit a 64-bit INTEGER column
            logger.error("invoice_transaction_failed", error=str(e))
            raise TransactionFailedError("create_invoice", str(e)) from e

    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        """Get invoice by ID with line items."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM invoices WHERE id = ?",
                (invoice_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None

            items = await self._load_line_items(conn, invoice_id)
            return self._row_to_invoice(row, items)

    async def list_invoices(
        self, limit: int = 100, offset: int = 0
    ) -> list[Invoice]:
        """List invoices, newest first."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM invoices
                ORDER BY issued_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()

            invoices = []
            for row in rows:
                items = await self._load_line_items(conn, row["id"])
                invoices.append(self._row_to_invoice(row, items))
            return invoices

    @staticmethod
    async def _load_line_items(
        conn: aiosqlite.Connection, invoice_id: int
    ) -> list[LineItem]:
        cursor = await conn.execute(
            """
            SELECT * FROM invoice_line_items
            WHERE invoice_id = ?
            ORDER BY id
            """,
            (invoice_id,),
        )
        rows = await cursor.fetchall()
        return [
            LineItem(
                id=r["id"],
                invoice_id=r["invoice_id"],
                product_id=r["product_id"],
                product_name=r["product_name"],
                product_sku=r["product_sku"],
                quantity=int(r["quantity"]),
                unit_price=from_cents(r["unit_price_cents"]),
            )
            for r in rows
        ]

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row, items: list[LineItem]) -> Invoice:
        """Convert a database row to an Invoice entity."""
        issued_at = datetime.fromisoformat(row["issued_at"])
        if issued_at.tzinfo is None:
            issued_at = issued_at.replace(tzinfo=UTC)

        return Invoice(
            id=row["id"],
            invoice_number=row["invoice_number"],
            customer_name=row["customer_name"],
            line_items=items,
            status=InvoiceStatus(row["status"]),
            subtotal=from_cents(row["subtotal_cents"]),
            tax_rate=Decimal(row["tax_rate"]),
            tax_amount=from_cents(row["tax_cents"]),
            total_amount=from_cents(row["total_cents"]),
            issued_at=issued_at,
            notes=row["notes"] or "",
            payment_method=row["payment_method"],
        )
