"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    CreateInvoiceRequest,
    CreateProductRequest,
    InvoiceLineRequest,
)
from src.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    InvoiceLineResponse,
    InvoiceListResponse,
    InvoiceResponse,
    ProductListResponse,
    ProductResponse,
    ProviderHealthResponse,
)

__all__ = [
    # Requests
    "CreateInvoiceRequest",
    "CreateProductRequest",
    "InvoiceLineRequest",
    # Responses
    "InvoiceResponse",
    "InvoiceLineResponse",
    "InvoiceListResponse",
    "ProductResponse",
    "ProductListResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "ErrorResponse",
]
