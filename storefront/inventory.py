"""Inventory Service - product catalog and stock lookups over HTTP"""
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from storefront.config import CartSettings
from storefront.errors import InventoryError
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import ProductInfo, Stock

logger = get_logger(__name__)


class InventoryService(Protocol):
    async def get_stock(self, product_id: int) -> Stock: ...

    async def get_product(self, product_id: int) -> ProductInfo: ...


class InventoryClient:
    """
    HTTP client for the inventory API.

    Routes:
        GET {base_url}/stock/{id}     -> {"id": 1, "amount": 3}
        GET {base_url}/products/{id}  -> {"id": 1, "title": ..., "price": ..., "image": ...}

    Any transport error, non-2xx status, non-JSON body or body that fails
    validation is raised as InventoryError. No retries.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, http_client: Optional[httpx.AsyncClient] = None):
        if not base_url:
            raise ValueError("Inventory base URL is not configured (INVENTORY_API_URL)")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # HTTP client (lazy, shared across requests)
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: CartSettings) -> "InventoryClient":
        return cls(settings.inventory_url, timeout=settings.inventory_timeout)

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazily create the shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
        return self._http_client

    async def _get_json(self, path: str) -> object:
        client = await self._get_http_client()
        url = f"{self.base_url}/{path}"
        try:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise InventoryError(f"GET {path} returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise InventoryError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            # resp.json() on a non-JSON body
            raise InventoryError(f"GET {path} returned a malformed body") from e

    async def get_stock(self, product_id: int) -> Stock:
        """Current available stock for a product."""
        data = await self._get_json(f"stock/{product_id}")
        try:
            stock = Stock.model_validate(data)
        except ValidationError as e:
            raise InventoryError(f"Invalid stock payload for product {product_id}: {e.error_count()} error(s)") from e
        logger.debug(f"Stock for product {sanitize_id_for_logging(product_id)}: {stock.amount}")
        return stock

    async def get_product(self, product_id: int) -> ProductInfo:
        """Catalog metadata for a product (no cart amount)."""
        data = await self._get_json(f"products/{product_id}")
        if isinstance(data, dict):
            # Catalog payloads never carry a cart amount
            data = {k: v for k, v in data.items() if k != "amount"}
        try:
            return ProductInfo.model_validate(data)
        except ValidationError as e:
            raise InventoryError(f"Invalid product payload for product {product_id}: {e.error_count()} error(s)") from e

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
