"""Product catalog endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_product_store
from src.application.dto.requests import CreateProductRequest
from src.application.dto.responses import (
    ErrorResponse,
    ProductListResponse,
    ProductResponse,
)
from src.core.entities.product import Product
from src.core.exceptions import ProductNotFoundError
from src.infrastructure.storage.sqlite import SQLiteCatalogStore

router = APIRouter(prefix="/api/products", tags=["products"])


def new_product_id() -> str:
    return f"prod_{uuid.uuid4().hex[:12]}"


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "SKU already exists"}},
)
async def create_product(
    request: CreateProductRequest,
    store: SQLiteCatalogStore = Depends(get_product_store),
) -> ProductResponse:
    """Add a product to the catalog."""
    product = Product(
        id=new_product_id(),
        sku=request.sku,
        name=request.name,
        description=request.description,
        price=request.price,
        cost_price=request.cost_price if request.cost_price is not None else request.price,
        stock_quantity=request.stock_quantity,
    )
    product = await store.create_product(product)
    return ProductResponse.from_entity(product)


@router.get("", response_model=ProductListResponse)
async def list_products(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: SQLiteCatalogStore = Depends(get_product_store),
) -> ProductListResponse:
    """List catalog products, newest first."""
    products = await store.list_products(limit=limit, offset=offset)
    return ProductListResponse(
        products=[ProductResponse.from_entity(p) for p in products],
        total=len(products),
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: str,
    store: SQLiteCatalogStore = Depends(get_product_store),
) -> ProductResponse:
    """Get a product by ID."""
    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ProductResponse.from_entity(product)
