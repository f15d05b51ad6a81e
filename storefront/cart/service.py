"""Cart engine: stock-checked cart mutations with snapshot persistence."""
import asyncio
import inspect
from typing import Optional, Set

from storefront.config import CartSettings
from storefront.errors import (
    ERROR_ADD_FAILED,
    ERROR_REMOVE_FAILED,
    ERROR_UPDATE_FAILED,
    CartError,
    CartOperationError,
    CorruptCartDataError,
    ItemNotFoundError,
    StockInsufficientError,
)
from storefront.i18n import get_text
from storefront.inventory import InventoryService
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.models import Product
from storefront.notifications import Notifier
from storefront.storage import CartStore

from .models import Cart, CartResult

logger = get_logger(__name__)


class CartEngine:
    """
    Owns the cart snapshot and the only three ways to change it.

    Features:
    - Stock is fetched fresh before every add/update; nothing is cached
    - Commit = store write, then in-memory swap (both or neither)
    - Mutations are serialized per instance by an asyncio.Lock
    - Failures come back as CartResult; the notifier is not awaited

    Usage:
        engine = await CartEngine.create(inventory, store, notifier)
        result = await engine.add_product(1)
        engine.cart  # current snapshot
        await engine.aclose()  # drain pending notifications
    """

    def __init__(
        self,
        inventory: InventoryService,
        store: CartStore,
        notifier: Notifier,
        settings: Optional[CartSettings] = None,
        cart: Optional[Cart] = None,
    ):
        self.inventory = inventory
        self.store = store
        self.notifier = notifier
        self.settings = settings or CartSettings()
        self._cart = cart if cart is not None else Cart()
        self._lock = asyncio.Lock()
        self._notifications: Set["asyncio.Future"] = set()

    @classmethod
    async def create(
        cls,
        inventory: InventoryService,
        store: CartStore,
        notifier: Notifier,
        settings: Optional[CartSettings] = None,
    ) -> "CartEngine":
        """Build an engine seeded from the stored snapshot (empty if none)."""
        settings = settings or CartSettings()
        cart = await cls._load_snapshot(store, settings.storage_key)
        return cls(inventory, store, notifier, settings=settings, cart=cart)

    @staticmethod
    async def _load_snapshot(store: CartStore, key: str) -> Cart:
        try:
            data = await store.load(key)
        except Exception as e:
            logger.warning(f"Failed to load stored cart, starting empty: {e}")
            return Cart()

        if not data:
            return Cart()

        try:
            cart = Cart.from_json(data)
        except CorruptCartDataError as e:
            # Fail closed: the bad value is overwritten by the next commit
            logger.warning(f"Ignoring corrupted stored cart: {e}")
            return Cart()

        logger.info(f"Restored cart with {len(cart)} line(s)")
        return cart

    # ==================== READ ACCESS ====================

    @property
    def cart(self) -> Cart:
        """Current snapshot (immutable)."""
        return self._cart

    def get_item(self, product_id: int) -> Optional[Product]:
        return self._cart.get(product_id)

    @property
    def cart_size(self) -> int:
        """Number of distinct products in the cart."""
        return len(self._cart)

    def __len__(self) -> int:
        return len(self._cart)

    # ==================== OPERATIONS ====================

    async def add_product(self, product_id: int) -> CartResult:
        """Add one unit of a product, fetching its metadata if it is new."""
        async with self._lock:
            try:
                result = await self._add(product_id)
            except CartError as e:
                result = CartResult.failure(self._cart, e)
            except Exception as e:
                result = self._fault(e, product_id, ERROR_ADD_FAILED)
        self._report(result)
        return result

    async def remove_product(self, product_id: int) -> CartResult:
        """Remove a product's line from the cart."""
        async with self._lock:
            try:
                result = await self._remove(product_id)
            except CartError as e:
                result = CartResult.failure(self._cart, e)
            except Exception as e:
                result = self._fault(e, product_id, ERROR_REMOVE_FAILED)
        self._report(result)
        return result

    async def update_product_amount(self, product_id: int, amount: int) -> CartResult:
        """
        Set the amount of a product already in the cart.

        amount <= 0 is a no-op (use remove_product instead): no stock call,
        no notification. An id that is not in the cart leaves it unchanged.
        """
        if amount <= 0:
            return CartResult.success(self._cart, changed=False)

        async with self._lock:
            try:
                result = await self._update(product_id, amount)
            except CartError as e:
                result = CartResult.failure(self._cart, e)
            except Exception as e:
                result = self._fault(e, product_id, ERROR_UPDATE_FAILED)
        self._report(result)
        return result

    # ==================== INTERNALS ====================

    async def _add(self, product_id: int) -> CartResult:
        stock = await self.inventory.get_stock(product_id)

        current = self._cart
        existing = current.get(product_id)
        desired_amount = existing.amount + 1 if existing else 1

        if desired_amount > stock.amount:
            raise StockInsufficientError(product_id, desired_amount, stock.amount)

        if existing:
            updated = current.with_amount(product_id, desired_amount)
        else:
            info = await self.inventory.get_product(product_id)
            updated = current.appended(Product.from_info(info, amount=1))

        await self._commit(updated)
        logger.info(f"Added product {sanitize_id_for_logging(product_id)} (amount={desired_amount})")
        return CartResult.success(updated)

    async def _remove(self, product_id: int) -> CartResult:
        current = self._cart
        if product_id not in current:
            raise ItemNotFoundError(product_id)

        updated = current.without(product_id)
        await self._commit(updated)
        logger.info(f"Removed product {sanitize_id_for_logging(product_id)}")
        return CartResult.success(updated)

    async def _update(self, product_id: int, amount: int) -> CartResult:
        stock = await self.inventory.get_stock(product_id)

        if stock.amount < amount:
            raise StockInsufficientError(product_id, amount, stock.amount)

        current = self._cart
        updated = current.with_amount(product_id, amount)
        await self._commit(updated)
        logger.info(f"Set product {sanitize_id_for_logging(product_id)} amount={amount}")
        return CartResult.success(updated, changed=updated != current)

    async def _commit(self, updated: Cart) -> None:
        """Write the snapshot, then swap it in. A failed write leaves memory untouched."""
        await self.store.save(self.settings.storage_key, updated.to_json())
        self._cart = updated

    def _fault(self, exc: Exception, product_id: int, message_key: str) -> CartResult:
        logger.warning(
            f"Cart operation failed for product {sanitize_id_for_logging(product_id)}: "
            f"{type(exc).__name__}: {exc}"
        )
        error = CartOperationError(str(exc), product_id=product_id, message_key=message_key)
        error.__cause__ = exc
        return CartResult.failure(self._cart, error)

    def _report(self, result: CartResult) -> None:
        """
        Hand a failed result's message to the notifier without waiting on it.

        Sync notifiers run inline; awaitable ones are scheduled as tasks that
        aclose() drains. Notifier errors are only logged.
        """
        if result.ok or result.error is None:
            return
        if isinstance(result.error, StockInsufficientError):
            logger.info(f"Stock check rejected: {result.error}")
        message = get_text(result.error.message_key, self.settings.language)
        try:
            outcome = self.notifier.error(message)
        except Exception:
            logger.exception("Notifier failed")
            return
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._notifications.add(task)
            task.add_done_callback(self._notification_done)

    def _notification_done(self, task: "asyncio.Future") -> None:
        self._notifications.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Notifier failed: {type(exc).__name__}: {exc}")

    async def aclose(self) -> None:
        """Wait for notifications still in flight."""
        if self._notifications:
            await asyncio.gather(*list(self._notifications), return_exceptions=True)
