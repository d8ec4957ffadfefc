"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

# Keeps cents far inside a 64-bit INTEGER column
MAX_PRICE = Decimal("1000000000.00")


class InvoiceLineRequest(BaseModel):
    """A single requested line on a new invoice."""

    product_id: str = Field(..., min_length=1, description="Catalog product ID")
    quantity: int = Field(..., ge=1, description="Units to sell")


class CreateInvoiceRequest(BaseModel):
    """Request to create an invoice."""

    customer_name: str | None = Field(
        default=None,
        description="Customer name (defaults to the walk-in customer)",
        examples=["Walk-in Customer", "Asha Traders"],
    )
    line_items: list[InvoiceLineRequest] = Field(
        default_factory=list,
        description="Products and quantities to sell",
    )
    notes: str | None = Field(default=None, description="Free-text notes")
    payment_method: str | None = Field(
        default=None,
        description="How the invoice was paid",
        examples=["cash", "card", "upi"],
    )
    mark_paid: bool | None = Field(
        default=None,
        description=(
            "Mark the invoice paid on creation. When omitted, a non-blank "
            "payment_method marks it paid."
        ),
    )


class CreateProductRequest(BaseModel):
    """Request to add a product to the catalog."""

    sku: str = Field(..., min_length=1, description="Unique stock-keeping unit")
    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field(default="", description="Product description")
    price: Decimal = Field(..., ge=0, le=MAX_PRICE, description="Unit selling price")
    cost_price: Decimal | None = Field(
        default=None, ge=0, le=MAX_PRICE, description="Unit cost (defaults to price)"
    )
    stock_quantity: int = Field(default=0, ge=0, description="Units on hand")
