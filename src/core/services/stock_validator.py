"""Stock reservation checks for a requested set of invoice lines."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from src.config import get_logger
from src.core.entities.invoice import LineItemRequest
from src.core.exceptions import (
    EmptyInvoiceError,
    InsufficientStockError,
    ProductNotFoundError,
)
from src.core.interfaces.catalog import ICatalogAccessor

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValidatedLine:
    """A requested line plus the product snapshot taken while validating."""

    product_id: str
    product_name: str
    product_sku: str
    unit_price: Decimal
    quantity: int


@dataclass
class ValidatedLines:
    """Result of a successful validation."""

    lines: list[ValidatedLine] = field(default_factory=list)
    # product_id -> aggregated quantity, in first-seen order
    demand: dict[str, int] = field(default_factory=dict)


def aggregate_demand(requests: Sequence[LineItemRequest]) -> dict[str, int]:
    """Sum requested quantities per product, preserving first-seen order."""
    demand: dict[str, int] = {}
    for req in requests:
        demand[req.product_id] = demand.get(req.product_id, 0) + req.quantity
    return demand


class StockReservationValidator:
    """Check aggregated demand against current stock."""

    async def validate(
        self,
        requests: Sequence[LineItemRequest],
        catalog: ICatalogAccessor,
    ) -> ValidatedLines:
        """
        Validate every requested line against the catalog.

        Duplicate products are checked against their combined quantity.
        Returns one ValidatedLine per request entry, in request order.

        Raises:
            EmptyInvoiceError: no requests
            ProductNotFoundError: unknown product id
            InsufficientStockError: combined demand exceeds stock
        """
        if not requests:
            raise EmptyInvoiceError()

        demand = aggregate_demand(requests)
        products = {}
        for product_id, wanted in demand.items():
            product = await catalog.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if wanted > product.stock_quantity:
                logger.info(
                    "stock_check_failed",
                    product_id=product_id,
                    requested=wanted,
                    available=product.stock_quantity,
                )
                raise InsufficientStockError(
                    product_id=product_id,
                    product_name=product.name,
                    requested=wanted,
                    available=product.stock_quantity,
                )
            products[product_id] = product

        lines = [
            ValidatedLine(
                product_id=req.product_id,
                product_name=products[req.product_id].name,
                product_sku=products[req.product_id].sku,
                unit_price=products[req.product_id].price,
                quantity=req.quantity,
            )
            for req in requests
        ]
        return ValidatedLines(lines=lines, demand=demand)
