"""Invoice domain entities."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from src.core.entities.money import quantize_money

DEFAULT_CUSTOMER_NAME = "Walk-in Customer"
DEFAULT_TAX_RATE = Decimal("0.18")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InvoiceStatus(str, Enum):
    """Invoice lifecycle states."""

    DRAFT = "draft"
    PAID = "paid"
    OVERDUE = "overdue"


class LineItemRequest(BaseModel):
    """One requested (product, quantity) pair before validation."""

    product_id: str
    quantity: int = Field(..., ge=1)


class LineItem(BaseModel):
    """A line on an invoice, snapshotting the product as it was when sold."""

    id: int | None = None
    invoice_id: int | None = None
    product_id: str
    product_name: str  # snapshot
    product_sku: str  # snapshot
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)  # snapshot
    line_total: Decimal = Decimal("0.00")

    @field_validator("unit_price")
    @classmethod
    def round_unit_price(cls, v: Decimal) -> Decimal:
        return quantize_money(v)

    @model_validator(mode="after")
    def compute_line_total(self) -> "LineItem":
        """line_total = unit_price * quantity, exact to the cent."""
        self.line_total = quantize_money(self.unit_price * self.quantity)
        return self


class Invoice(BaseModel):
    """Invoice aggregate root.

    Created together with its line items in one transaction and immutable
    afterwards apart from the draft -> paid transition.
    """

    id: int | None = None
    invoice_number: str = ""
    customer_name: str = DEFAULT_CUSTOMER_NAME
    line_items: list[LineItem] = Field(default_factory=list)
    status: InvoiceStatus = InvoiceStatus.DRAFT
    subtotal: Decimal = Decimal("0.00")
    tax_rate: Decimal = DEFAULT_TAX_RATE
    tax_amount: Decimal = Decimal("0.00")
    total_amount: Decimal = Decimal("0.00")
    issued_at: datetime = Field(default_factory=_utcnow)
    notes: str = ""
    payment_method: str | None = None

    @property
    def items_count(self) -> int:
        return len(self.line_items)

    def mark_as_paid(self, payment_method: str) -> None:
        """Transition draft -> paid, recording how it was paid."""
        if self.status == InvoiceStatus.PAID:
            raise ValueError(f"Invoice {self.invoice_number} is already paid")
        self.status = InvoiceStatus.PAID
        self.payment_method = payment_method
