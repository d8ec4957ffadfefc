"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
Money fields are Decimals and serialize as two-place strings.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.core.entities.invoice import Invoice
from src.core.entities.product import Product


class InvoiceLineResponse(BaseModel):
    """Line item in invoice response."""

    id: int
    product_id: str
    product_name: str
    product_sku: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class InvoiceResponse(BaseModel):
    """Persisted invoice."""

    id: int
    invoice_number: str
    customer_name: str
    line_items: list[InvoiceLineResponse]
    status: str
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    issued_at: datetime
    notes: str
    payment_method: str | None = None

    @classmethod
    def from_entity(cls, invoice: Invoice) -> "InvoiceResponse":
        return cls(
            id=invoice.id,  # type: ignore[arg-type]
            invoice_number=invoice.invoice_number,
            customer_name=invoice.customer_name,
            line_items=[
                InvoiceLineResponse(
                    id=item.id,  # type: ignore[arg-type]
                    product_id=item.product_id,
                    product_name=item.product_name,
                    product_sku=item.product_sku,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in invoice.line_items
            ],
            status=invoice.status.value,
            subtotal=invoice.subtotal,
            tax_rate=invoice.tax_rate,
            tax_amount=invoice.tax_amount,
            total_amount=invoice.total_amount,
            issued_at=invoice.issued_at,
            notes=invoice.notes,
            payment_method=invoice.payment_method,
        )


class InvoiceListResponse(BaseModel):
    """Paginated list of invoices."""

    invoices: list[InvoiceResponse]
    total: int


class ProductResponse(BaseModel):
    """Catalog product."""

    id: str
    sku: str
    name: str
    description: str
    price: Decimal
    cost_price: Decimal | None = None
    stock_quantity: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> "ProductResponse":
        return cls(**product.model_dump())


class ProductListResponse(BaseModel):
    """Paginated list of products."""

    products: list[ProductResponse]
    total: int


class ProviderHealthResponse(BaseModel):
    """Health of one backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict | None = Field(default=None, description="Structured error context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
