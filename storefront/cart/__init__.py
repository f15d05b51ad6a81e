"""Cart package: snapshot models, engine, and engine lifecycle."""
import contextlib
from typing import AsyncIterator, Optional

from storefront.config import CartSettings
from storefront.inventory import InventoryClient, InventoryService
from storefront.notifications import Notifier, build_notifier
from storefront.storage import CartStore, build_store

from .models import Cart, CartResult
from .service import CartEngine


@contextlib.asynccontextmanager
async def open_cart_engine(
    settings: Optional[CartSettings] = None,
    inventory: Optional[InventoryService] = None,
    store: Optional[CartStore] = None,
    notifier: Optional[Notifier] = None,
) -> AsyncIterator[CartEngine]:
    """
    Build a CartEngine, yield it, then wait for pending notifications and
    close what was created here.

    Collaborators passed in are used as-is and left open; missing ones are
    built from settings (CartSettings.from_env() when settings is None).
    """
    settings = settings or CartSettings.from_env()
    owned = []

    if inventory is None:
        inventory = InventoryClient.from_settings(settings)
        owned.append(inventory)
    if store is None:
        store = build_store(settings)
    if notifier is None:
        notifier = build_notifier(settings)
        owned.append(notifier)

    try:
        engine = await CartEngine.create(inventory, store, notifier, settings=settings)
        try:
            yield engine
        finally:
            await engine.aclose()
    finally:
        for resource in owned:
            aclose = getattr(resource, "aclose", None)
            if aclose is not None:
                await aclose()


__all__ = [
    "Cart",
    "CartResult",
    "CartEngine",
    "open_cart_engine",
]
