"""
Domain exceptions for Tillbook.

Every error carries a machine-readable code and a details dict so the API
layer can render it without knowing the concrete type.
"""

from typing import Any


class TillbookError(Exception):
    """Base exception for all Tillbook errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(TillbookError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value else None,
            },
        )


class EmptyInvoiceError(ValidationError):
    """Invoice request carries no line items."""

    def __init__(self) -> None:
        TillbookError.__init__(
            self,
            "Invoice must have at least one line item",
            code="EMPTY_INVOICE",
            details={"field": "line_items"},
        )


# Catalog Exceptions
class CatalogError(TillbookError):
    """Base exception for product catalog lookups."""

    pass


class ProductNotFoundError(CatalogError):
    """Requested product does not exist in the catalog."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class DuplicateSkuError(CatalogError):
    """A product with the same SKU already exists."""

    def __init__(self, sku: str):
        super().__init__(
            f"SKU already exists: {sku}",
            code="DUPLICATE_SKU",
            details={"sku": sku},
        )


# Stock Exceptions
class StockError(TillbookError):
    """Base exception for stock availability problems."""

    pass


class InsufficientStockError(StockError):
    """Aggregated demand for a product exceeds its stock."""

    def __init__(
        self,
        product_id: str,
        product_name: str,
        requested: int,
        available: int,
    ):
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Available: {available}, Requested: {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested": requested,
                "available": available,
            },
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


# Storage Exceptions
class StorageError(TillbookError):
    """Base exception for storage operations."""

    pass


class InvoiceNotFoundError(StorageError):
    """Invoice not found in storage."""

    def __init__(self, invoice_id: int):
        super().__init__(
            f"Invoice not found: {invoice_id}",
            code="INVOICE_NOT_FOUND",
            details={"invoice_id": invoice_id},
        )


class InvoiceNumberConflictError(StorageError):
    """Invoice number collided with an existing one at commit time."""

    def __init__(self, invoice_number: str, attempts: int = 1):
        super().__init__(
            f"Invoice number already taken: {invoice_number}",
            code="INVOICE_NUMBER_CONFLICT",
            details={"invoice_number": invoice_number, "attempts": attempts},
        )
        self.invoice_number = invoice_number


class TransactionFailedError(StorageError):
    """Commit-time failure; the whole unit of work was rolled back."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Transaction failed during {operation}: {error}",
            code="TRANSACTION_FAILED",
            details={"operation": operation, "error": error},
        )

