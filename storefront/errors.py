"""
Cart errors and user-facing message keys.

Message keys resolve through storefront.i18n.get_text; the English strings live
in locales/en.json.
"""

from typing import Optional

# User-facing message keys
ERROR_STOCK_INSUFFICIENT = "cart.stock_insufficient"
ERROR_ADD_FAILED = "cart.add_failed"
ERROR_REMOVE_FAILED = "cart.remove_failed"
ERROR_UPDATE_FAILED = "cart.update_failed"


class CartError(Exception):
    """Base class for failures reported by a cart operation."""

    message_key = ERROR_ADD_FAILED

    def __init__(self, detail: str = "", product_id: Optional[int] = None, message_key: Optional[str] = None):
        super().__init__(detail or self.__class__.__name__)
        self.product_id = product_id
        if message_key is not None:
            self.message_key = message_key


class StockInsufficientError(CartError):
    """Requested or implied quantity exceeds available stock."""

    message_key = ERROR_STOCK_INSUFFICIENT

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Product {product_id}: requested={requested}, available={available}",
            product_id=product_id,
        )
        self.requested = requested
        self.available = available


class ItemNotFoundError(CartError):
    """Remove requested for a product that is not in the cart."""

    message_key = ERROR_REMOVE_FAILED

    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} is not in the cart", product_id=product_id)


class CartOperationError(CartError):
    """Transport or unexpected failure; the original exception is __cause__."""


class InventoryError(Exception):
    """Inventory service call failed (network, HTTP status or malformed body)."""


class StorageError(Exception):
    """Persistence backend failed to read or write."""


class CorruptCartDataError(ValueError):
    """Stored cart snapshot cannot be decoded."""


__all__ = [
    "ERROR_STOCK_INSUFFICIENT",
    "ERROR_ADD_FAILED",
    "ERROR_REMOVE_FAILED",
    "ERROR_UPDATE_FAILED",
    "CartError",
    "StockInsufficientError",
    "ItemNotFoundError",
    "CartOperationError",
    "InventoryError",
    "StorageError",
    "CorruptCartDataError",
]
