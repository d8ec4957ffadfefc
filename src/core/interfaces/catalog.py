"""Abstract interfaces for the product catalog."""

from abc import ABC, abstractmethod

from src.core.entities.product import Product


class ICatalogAccessor(ABC):
    """Read/decrement access to products, bound to the caller's transaction."""

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get current price and stock for a product, or None if unknown."""
        pass

    @abstractmethod
    async def decrement_stock(self, product_id: str, amount: int) -> Product:
        """
        Remove `amount` units from stock.

        Raises InsufficientStockError if stock would go negative and
        ProductNotFoundError if the product does not exist.
        """
        pass


class ICatalogStore(ABC):
    """Interface for product persistence outside invoice transactions."""

    @abstractmethod
    async def create_product(self, product: Product) -> Product:
        """Create a product. Raises DuplicateSkuError on SKU collision."""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def list_products(
        self, limit: int = 100, offset: int = 0
    ) -> list[Product]:
        """List products, newest first."""
        pass
