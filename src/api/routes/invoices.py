"""Invoice endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_create_invoice_use_case, get_inv_store
from src.application.dto.requests import CreateInvoiceRequest
from src.application.dto.responses import (
    ErrorResponse,
    InvoiceListResponse,
    InvoiceResponse,
)
from src.application.use_cases.create_invoice import CreateInvoiceUseCase
from src.core.exceptions import InvoiceNotFoundError
from src.infrastructure.storage.sqlite import SQLiteInvoiceStore

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
    "",
    response_model=InvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "No line items"},
        404: {"model": ErrorResponse, "description": "Unknown product"},
        409: {"model": ErrorResponse, "description": "Insufficient stock or number conflict"},
        503: {"model": ErrorResponse, "description": "Transaction rolled back"},
    },
)
async def create_invoice(
    request: CreateInvoiceRequest,
    use_case: CreateInvoiceUseCase = Depends(get_create_invoice_use_case),
) -> InvoiceResponse:
    """Create an invoice, decrementing stock for every line atomically."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteInvoiceStore = Depends(get_inv_store),
) -> InvoiceListResponse:
    """List invoices, newest first."""
    invoices = await store.list_invoices(limit=limit, offset=offset)
    return InvoiceListResponse(
        invoices=[InvoiceResponse.from_entity(inv) for inv in invoices],
        total=len(invoices),
    )


@router.get(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_invoice(
    invoice_id: int,
    store: SQLiteInvoiceStore = Depends(get_inv_store),
) -> InvoiceResponse:
    """Get an invoice with its line items."""
    invoice = await store.get_invoice(invoice_id)
    if invoice is None:
        raise InvoiceNotFoundError(invoice_id)
    return InvoiceResponse.from_entity(invoice)
