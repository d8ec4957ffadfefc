"""Application use cases."""

from src.application.use_cases.create_invoice import (
    CreateInvoiceResult,
    CreateInvoiceUseCase,
)

__all__ = [
    "CreateInvoiceUseCase",
    "CreateInvoiceResult",
]
