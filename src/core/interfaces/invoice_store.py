"""Abstract interface for invoice storage."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from src.core.entities.invoice import Invoice
from src.core.interfaces.catalog import ICatalogAccessor


class IInvoiceTransaction(ICatalogAccessor):
    """
    One all-or-nothing unit of work against the store.

    Catalog reads, the invoice count, inserts and stock decrements all run
    under the same isolation scope.
    """

    @abstractmethod
    async def count_invoices(self) -> int:
        """Number of invoices ever committed."""
        pass

    @abstractmethod
    async def add_invoice(self, invoice: Invoice) -> Invoice:
        """
        Insert the invoice header and all its line items.

        Raises InvoiceNumberConflictError if the number is already taken;
        the transaction stays usable so the caller may renumber.
        """
        pass


class IInvoiceStore(ABC):
    """Interface for invoice persistence."""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[IInvoiceTransaction]:
        """
        Open a transaction.

        Commits when the block exits normally, rolls back on any exception.
        Driver failures surface as TransactionFailedError.
        """
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: int) -> Invoice | None:
        """Get invoice by ID with line items."""
        pass

    @abstractmethod
    async def list_invoices(
        self, limit: int = 100, offset: int = 0
    ) -> list[Invoice]:
        """List invoices, newest first."""
        pass
