"""
Error rendering for the HTTP API.

Every failure leaves as an ErrorResponse body carrying error_code, message,
hint and, for domain errors, the structured details (for example the
available and requested quantities of an INSUFFICIENT_STOCK rejection).
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.application.dto.responses import ErrorResponse
from src.config import get_logger
from src.core.exceptions import (
    CatalogError,
    DuplicateSkuError,
    InvoiceNotFoundError,
    InvoiceNumberConflictError,
    StockError,
    StorageError,
    TillbookError,
    TransactionFailedError,
    ValidationError,
)

logger = get_logger(__name__)


# Checked in order; DuplicateSkuError must precede CatalogError
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    DuplicateSkuError: status.HTTP_409_CONFLICT,
    CatalogError: status.HTTP_404_NOT_FOUND,
    StockError: status.HTTP_409_CONFLICT,
    InvoiceNotFoundError: status.HTTP_404_NOT_FOUND,
    InvoiceNumberConflictError: status.HTTP_409_CONFLICT,
    TransactionFailedError: status.HTTP_503_SERVICE_UNAVAILABLE,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

HINT_MAP: dict[str, str] = {
    "EMPTY_INVOICE": "Add at least one line item with a product_id and quantity.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "PRODUCT_NOT_FOUND": "Check the product ID; GET /api/products lists the catalog.",
    "DUPLICATE_SKU": "Choose a different SKU; each product needs a unique one.",
    "INSUFFICIENT_STOCK": "Reduce the quantity to at most the available stock.",
    "INVOICE_NOT_FOUND": "Check the invoice ID; GET /api/invoices lists invoices.",
    "INVOICE_NUMBER_CONFLICT": "Another invoice took this number. Retry the request.",
    "TRANSACTION_FAILED": "Nothing was saved and stock is unchanged. Retry the request.",
}

# Codes for plain HTTPExceptions raised by routing
HTTP_ERROR_CODES: dict[int, str] = {
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _render(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    **extra,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=HINT_MAP.get(error_code),
        path=request.url.path,
        **extra,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log the failure and turn it into an error body with the mapped status."""
    status_code = _status_for(exc)
    if isinstance(exc, TillbookError):
        error_code, message, details = exc.code, exc.message, exc.details or None
    else:
        # Unexpected errors do not leak their text to clients
        error_code, message, details = "INTERNAL_ERROR", "Internal server error", None

    if status_code >= 500:
        logger.error(
            "request_error",
            path=request.url.path,
            error_code=error_code,
            error=str(exc),
            traceback=traceback.format_exception(exc),
        )
    else:
        logger.warning(
            "request_rejected",
            path=request.url.path,
            error_code=error_code,
            error=message,
        )

    return _render(request, status_code, error_code, message, details=details)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Renders exceptions that escaped every registered handler."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(TillbookError)
    async def domain_exception_handler(request: Request, exc: TillbookError) -> JSONResponse:
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        return _render(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            detail="; ".join(problems),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _render(
            request,
            exc.status_code,
            HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
            str(exc.detail) if exc.detail else "Request failed",
        )
