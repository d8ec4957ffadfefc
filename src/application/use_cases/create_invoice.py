"""Create Invoice Use Case: validate stock, total, number and commit atomically."""

from dataclasses import dataclass
from datetime import datetime

from src.application.dto.requests import CreateInvoiceRequest
from src.application.dto.responses import InvoiceResponse
from src.config import get_logger, get_settings
from src.config.settings import InvoicingSettings
from src.core.entities.invoice import (
    Invoice,
    InvoiceStatus,
    LineItem,
    LineItemRequest,
)
from src.core.exceptions import EmptyInvoiceError, InvoiceNumberConflictError
from src.core.interfaces.clock import IClock
from src.core.interfaces.invoice_store import IInvoiceStore, IInvoiceTransaction
from src.core.services.invoice_numbering import next_invoice_number, parse_invoice_number
from src.core.services.stock_validator import StockReservationValidator
from src.core.services.totals_calculator import compute_totals

logger = get_logger(__name__)


@dataclass
class CreateInvoiceResult:
    """Result of creating an invoice."""

    invoice: Invoice


class CreateInvoiceUseCase:
    """
    Turn a cart of (product, quantity) requests into a persisted invoice.

    Stock check, numbering, invoice and line item inserts, and stock
    decrements share one store transaction: either all of them are
    committed or none are.
    """

    def __init__(
        self,
        invoice_store: IInvoiceStore | None = None,
        clock: IClock | None = None,
        validator: StockReservationValidator | None = None,
        invoicing: InvoicingSettings | None = None,
    ):
        self._invoice_store = invoice_store
        self._validator = validator or StockReservationValidator()
        self._invoicing = invoicing or get_settings().invoicing
        if clock is None:
            from src.infrastructure.clock import SystemClock

            clock = SystemClock()
        self._clock = clock

    async def _get_invoice_store(self) -> IInvoiceStore:
        if self._invoice_store is None:
            from src.infrastructure.storage.sqlite import get_invoice_store

            self._invoice_store = await get_invoice_store()
        return self._invoice_store

    async def execute(self, request: CreateInvoiceRequest) -> CreateInvoiceResult:
        """Execute create invoice use case."""
        logger.info(
            "create_invoice_started",
            customer=request.customer_name,
            lines=len(request.line_items),
        )

        # Rejected before touching the store
        if not request.line_items:
            raise EmptyInvoiceError()

        line_requests = [
            LineItemRequest(product_id=line.product_id, quantity=line.quantity)
            for line in request.line_items
        ]
        paid, payment_method = self._resolve_payment(request)
        customer_name = (
            request.customer_name or ""
        ).strip() or self._invoicing.default_customer_name

        store = await self._get_invoice_store()
        now = self._clock.now()

        async with store.transaction() as tx:
            validated = await self._validator.validate(line_requests, tx)

            line_items = [
                LineItem(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    product_sku=line.product_sku,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for line in validated.lines
            ]
            totals = compute_totals(line_items, self._invoicing.tax_rate)

            invoice = Invoice(
                customer_name=customer_name,
                line_items=line_items,
                subtotal=totals.subtotal,
                tax_rate=self._invoicing.tax_rate,
                tax_amount=totals.tax_amount,
                total_amount=totals.total_amount,
                issued_at=now,
                notes=request.notes or "",
                payment_method=payment_method,
            )
            if paid:
                invoice.mark_as_paid(payment_method or self._invoicing.default_payment_method)

            invoice = await self._insert_numbered(tx, invoice, now)

            for product_id, quantity in validated.demand.items():
                await tx.decrement_stock(product_id, quantity)

        logger.info(
            "create_invoice_complete",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            status=invoice.status.value,
            total=str(invoice.total_amount),
        )

        return CreateInvoiceResult(invoice=invoice)

    async def _insert_numbered(
        self,
        tx: IInvoiceTransaction,
        invoice: Invoice,
        now: datetime,
    ) -> Invoice:
        """Number and insert the invoice, moving to the next sequence on collision."""
        prefix = self._invoicing.number_prefix
        attempts = self._invoicing.number_max_attempts
        invoice.invoice_number = next_invoice_number(
            await tx.count_invoices(), now, prefix=prefix
        )

        for attempt in range(1, attempts + 1):
            try:
                return await tx.add_invoice(invoice)
            except InvoiceNumberConflictError:
                sequence = parse_invoice_number(invoice.invoice_number)[3]
                logger.warning(
                    "invoice_number_conflict",
                    invoice_number=invoice.invoice_number,
                    sequence=sequence,
                    attempt=attempt,
                )
                if attempt == attempts:
                    break
                invoice.invoice_number = next_invoice_number(sequence, now, prefix=prefix)

        raise InvoiceNumberConflictError(invoice.invoice_number, attempts=attempts)

    def _resolve_payment(
        self, request: CreateInvoiceRequest
    ) -> tuple[bool, str | None]:
        """Decide whether the invoice is paid on creation, and by what method."""
        method = (request.payment_method or "").strip() or None
        if request.mark_paid is None:
            return method is not None, method
        return request.mark_paid, method

    def to_response(self, result: CreateInvoiceResult) -> InvoiceResponse:
        """Convert result to API response."""
        return InvoiceResponse.from_entity(result.invoice)
