"""
Cart Storage - key/value byte stores for the cart snapshot.

Backends:
- MemoryCartStore: process-local dict (tests, embedding)
- FileCartStore: one JSON file per key in a local directory
- RedisCartStore: Upstash Redis over REST (async client)

Every backend exposes the same two coroutines:
    await store.load(key) -> bytes | None
    await store.save(key, data)
"""

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

from upstash_redis.asyncio import Redis as AsyncRedis

from storefront.config import CartSettings
from storefront.errors import StorageError
from storefront.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)


class CartStore(Protocol):
    async def load(self, key: str) -> Optional[bytes]: ...

    async def save(self, key: str, data: bytes) -> None: ...


class MemoryCartStore:
    """In-memory store. Holds bytes exactly as written."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self.data: Dict[str, bytes] = dict(initial or {})

    async def load(self, key: str) -> Optional[bytes]:
        return self.data.get(key)

    async def save(self, key: str, data: bytes) -> None:
        self.data[key] = bytes(data)


class FileCartStore:
    """
    Stores each key as a file under ``directory``.

    Writes go to a temp file first and are moved into place with os.replace,
    so a crash mid-write leaves the previous snapshot intact.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        safe_name = re.sub(r"[^A-Za-z0-9_.-]", "_", key).strip("._") or "cart"
        return self.directory / f"{safe_name}.json"

    def _read(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def _write(self, key: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def load(self, key: str) -> Optional[bytes]:
        try:
            return await asyncio.to_thread(self._read, key)
        except OSError as e:
            logger.error(f"Failed to read cart file for key {sanitize_string_for_logging(key)}: {e}")
            raise StorageError(f"Cart storage unavailable: {e}") from e

    async def save(self, key: str, data: bytes) -> None:
        try:
            await asyncio.to_thread(self._write, key, data)
        except OSError as e:
            logger.error(f"Failed to write cart file for key {sanitize_string_for_logging(key)}: {e}")
            raise StorageError(f"Cart storage unavailable: {e}") from e


class RedisCartStore:
    """
    Upstash Redis store.

    Values are stored as UTF-8 text (the REST API is string based).
    ``ttl`` (seconds) expires abandoned carts; None keeps them forever.
    """

    def __init__(self, client: Optional[AsyncRedis] = None, url: str = "", token: str = "", ttl: Optional[int] = None):
        if client is None:
            if not url or not token:
                raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
            client = AsyncRedis(url=url, token=token)
        self.client = client
        self.ttl = ttl

    async def load(self, key: str) -> Optional[bytes]:
        try:
            value = await self.client.get(key)
        except Exception as e:
            logger.error(f"Failed to get cart from Redis: {e}")
            raise StorageError(f"Cart storage unavailable: {e}") from e
        if value is None:
            return None
        return value.encode("utf-8") if isinstance(value, str) else bytes(value)

    async def save(self, key: str, data: bytes) -> None:
        try:
            if self.ttl:
                await self.client.set(key, data.decode("utf-8"), ex=self.ttl)
            else:
                await self.client.set(key, data.decode("utf-8"))
        except Exception as e:
            logger.error(f"Failed to save cart to Redis: {e}")
            raise StorageError(f"Cart storage unavailable: {e}") from e


def build_store(settings: CartSettings) -> CartStore:
    """Create the store backend named by settings.storage_backend."""
    if settings.storage_backend == "memory":
        return MemoryCartStore()
    if settings.storage_backend == "redis":
        return RedisCartStore(url=settings.redis_url, token=settings.redis_token)
    return FileCartStore(settings.storage_dir)
