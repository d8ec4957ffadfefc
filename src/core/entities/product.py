"""Product catalog entity."""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.core.entities.money import quantize_money


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Product(BaseModel):
    """A sellable product with its current price and stock level."""

    id: str
    sku: str  # unique, human-facing
    name: str
    description: str = ""
    price: Decimal = Field(..., ge=0)
    cost_price: Decimal | None = Field(default=None, ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("price", "cost_price")
    @classmethod
    def round_to_cents(cls, v: Decimal | None) -> Decimal | None:
        """Catalog amounts are held to the cent."""
        if v is None:
            return None
        return quantize_money(v)
