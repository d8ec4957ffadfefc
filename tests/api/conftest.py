"""Fixtures for API tests: the real app over a temp SQLite database."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import get_create_invoice_use_case
from src.api.main import app
from src.application.use_cases.create_invoice import CreateInvoiceUseCase
from src.config.settings import InvoicingSettings
from src.infrastructure.storage.sqlite import SQLiteInvoiceStore


@pytest.fixture
async def client(sqlite_pool, fixed_clock) -> AsyncGenerator[AsyncClient, None]:
    """Async client with the invoice use case pinned to a fixed clock."""
    app.dependency_overrides[get_create_invoice_use_case] = lambda: CreateInvoiceUseCase(
        SQLiteInvoiceStore(), fixed_clock, invoicing=InvoicingSettings()
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_create_invoice_use_case, None)


@pytest.fixture
async def seeded_client(client: AsyncClient) -> AsyncClient:
    """Client whose catalog already holds two products."""
    for body in (
        {"sku": "KET-01", "name": "Steel Kettle", "price": "100.00", "stock_quantity": 5},
        {"sku": "STR-01", "name": "Tea Strainer", "price": "19.99", "stock_quantity": 10},
    ):
        response = await client.post("/api/products", json=body)
        assert response.status_code == 201
    return client


@pytest.fixture
async def product_ids(seeded_client: AsyncClient) -> dict[str, str]:
    """SKU -> generated product id for the seeded catalog."""
    response = await seeded_client.get("/api/products")
    return {p["sku"]: p["id"] for p in response.json()["products"]}
