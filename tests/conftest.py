"""Pytest configuration and fixtures"""
import os
from typing import Dict, List, Optional

import pytest

from storefront.config import CartSettings
from storefront.errors import InventoryError
from storefront.models import ProductInfo, Stock
from storefront.notifications import RecordingNotifier
from storefront.storage import MemoryCartStore

# Keep tests independent of the developer's environment
os.environ.setdefault("CART_STORAGE_BACKEND", "memory")
os.environ.setdefault("CART_LANGUAGE", "en")

STORAGE_KEY = "@storefront:cart"


class FakeInventory:
    """Inventory double: stock/products from dicts, records every call."""

    def __init__(self, stock: Optional[Dict[int, int]] = None, products: Optional[Dict[int, dict]] = None):
        self.stock = dict(stock or {})
        self.products = dict(products or {})
        self.calls: List[tuple] = []
        self.fail_with: Optional[Exception] = None

    async def get_stock(self, product_id: int) -> Stock:
        self.calls.append(("stock", product_id))
        if self.fail_with is not None:
            raise self.fail_with
        if product_id not in self.stock:
            raise InventoryError(f"GET stock/{product_id} returned HTTP 404")
        return Stock(id=product_id, amount=self.stock[product_id])

    async def get_product(self, product_id: int) -> ProductInfo:
        self.calls.append(("product", product_id))
        if product_id not in self.products:
            raise InventoryError(f"GET products/{product_id} returned HTTP 404")
        return ProductInfo.model_validate(self.products[product_id])


class FailingStore(MemoryCartStore):
    """Memory store whose writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False

    async def save(self, key: str, data: bytes) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        await super().save(key, data)


def product_payload(product_id: int, **extra) -> dict:
    data = {
        "id": product_id,
        "title": f"Tênis modelo {product_id}",
        "price": 139.9 + product_id,
        "image": f"https://cdn.example.com/shoes/{product_id}.jpg",
    }
    data.update(extra)
    return data


@pytest.fixture
def settings() -> CartSettings:
    return CartSettings(storage_backend="memory", storage_key=STORAGE_KEY, language="en")


@pytest.fixture
def store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def inventory() -> FakeInventory:
    return FakeInventory(
        stock={1: 5, 2: 3, 3: 0},
        products={pid: product_payload(pid) for pid in (1, 2, 3)},
    )
