"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services

Use cases are the only entry point for API handlers that write.
"""

from src.application.dto.requests import (
    CreateInvoiceRequest,
    CreateProductRequest,
    InvoiceLineRequest,
)
from src.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoiceResponse,
    ProductListResponse,
    ProductResponse,
)
from src.application.use_cases import CreateInvoiceResult, CreateInvoiceUseCase

__all__ = [
    # Request DTOs
    "CreateInvoiceRequest",
    "CreateProductRequest",
    "InvoiceLineRequest",
    # Response DTOs
    "InvoiceResponse",
    "InvoiceListResponse",
    "ProductResponse",
    "ProductListResponse",
    "HealthResponse",
    "ErrorResponse",
    # Use Cases
    "CreateInvoiceUseCase",
    "CreateInvoiceResult",
]
