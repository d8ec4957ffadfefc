"""In-memory invoice store for use case tests."""

import copy
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import pytest

from src.core.entities.invoice import Invoice
from src.core.entities.product import Product
from src.core.exceptions import (
    InsufficientStockError,
    InvoiceNumberConflictError,
    ProductNotFoundError,
)
from src.core.interfaces.invoice_store import IInvoiceStore, IInvoiceTransaction


class InMemoryTransaction(IInvoiceTransaction):
    def __init__(self, store: "InMemoryInvoiceStore"):
        self._store = store

    async def get_product(self, product_id: str) -> Product | None:
        product = self._store.products.get(product_id)
        return product.model_copy() if product else None

    async def decrement_stock(self, product_id: str, amount: int) -> Product:
        self._store.decrements.append((product_id, amount))
        product = self._store.products.get(product_id)
        if product is None or product_id in self._store.vanished:
            raise ProductNotFoundError(product_id)
        if product.stock_quantity < amount:
            raise InsufficientStockError(
                product_id, product.name, amount, product.stock_quantity
            )
        product.stock_quantity -= amount
        return product.model_copy()

    async def count_invoices(self) -> int:
        return len(self._store.invoices)

    async def add_invoice(self, invoice: Invoice) -> Invoice:
        self._store.add_attempts.append(invoice.invoice_number)
        taken = self._store.taken_numbers | {i.invoice_number for i in self._store.invoices}
        if invoice.invoice_number in taken:
            raise InvoiceNumberConflictError(invoice.invoice_number)
        invoice.id = len(self._store.invoices) + 1
        for n, item in enumerate(invoice.line_items, start=1):
            item.invoice_id = invoice.id
            item.id = n
        self._store.invoices.append(invoice)
        return invoice


class InMemoryInvoiceStore(IInvoiceStore):
    """Snapshot-and-restore store: a failed block leaves nothing behind."""

    def __init__(self, products: list[Product] | None = None):
        self.products = {p.id: p for p in products or []}
        self.invoices: list[Invoice] = []
        self.taken_numbers: set[str] = set()
        self.add_attempts: list[str] = []
        self.decrements: list[tuple[str, int]] = []
        # products that disappear once validation has passed
        self.vanished: set[str] = set()
        self.transactions_opened = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[InMemoryTransaction]:
        self.transactions_opened += 1
        products = copy.deepcopy(self.products)
        invoices = list(self.invoices)
        try:
            yield InMemoryTransaction(self)
        except BaseException:
            self.products = products
            self.invoices = invoices
            raise

    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        return next((i for i in self.invoices if i.id == invoice_id), None)

    async def list_invoices(self, limit: int = 100, offset: int = 0) -> list[Invoice]:
        return list(reversed(self.invoices))[offset : offset + limit]


@pytest.fixture
def memory_store(sample_product: Product, second_product: Product) -> InMemoryInvoiceStore:
    return InMemoryInvoiceStore([sample_product, second_product])
