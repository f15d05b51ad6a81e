"""
Cart Settings - environment-driven configuration.

Environment variables:
- INVENTORY_API_URL, INVENTORY_TIMEOUT
- CART_STORAGE_KEY, CART_STORAGE_BACKEND, CART_STORAGE_DIR
- UPSTASH_REDIS_REST_URL, UPSTASH_REDIS_REST_TOKEN (redis backend)
- CART_LANGUAGE
- TELEGRAM_TOKEN, TELEGRAM_CHAT_ID (optional Telegram notifier)
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

DEFAULT_INVENTORY_URL = "http://localhost:3333"
DEFAULT_STORAGE_KEY = "@storefront:cart"
DEFAULT_STORAGE_DIR = ".storefront"

STORAGE_BACKENDS = ("memory", "file", "redis")


@dataclass(frozen=True)
class CartSettings:
    """Settings for one cart engine instance."""
    inventory_url: str = DEFAULT_INVENTORY_URL
    inventory_timeout: float = 10.0
    storage_key: str = DEFAULT_STORAGE_KEY
    storage_backend: str = "file"
    storage_dir: str = DEFAULT_STORAGE_DIR
    redis_url: str = ""
    redis_token: str = ""
    language: str = "en"
    telegram_token: str = ""
    telegram_chat_id: Optional[str] = None

    def __post_init__(self):
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown cart storage backend: {self.storage_backend!r} "
                f"(expected one of {', '.join(STORAGE_BACKENDS)})"
            )
        if self.inventory_timeout <= 0:
            raise ValueError("inventory_timeout must be positive")
        if not self.storage_key:
            raise ValueError("storage_key must be a non-empty string")

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_token and self.telegram_chat_id)

    @classmethod
    def from_env(cls, **overrides) -> "CartSettings":
        """Build settings from environment variables; keyword arguments win."""
        timeout_raw = os.environ.get("INVENTORY_TIMEOUT", "10.0")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ValueError(f"INVENTORY_TIMEOUT must be a number, got {timeout_raw!r}")

        settings = cls(
            inventory_url=os.environ.get("INVENTORY_API_URL", DEFAULT_INVENTORY_URL),
            inventory_timeout=timeout,
            storage_key=os.environ.get("CART_STORAGE_KEY", DEFAULT_STORAGE_KEY),
            storage_backend=os.environ.get("CART_STORAGE_BACKEND", "file").lower(),
            storage_dir=os.environ.get("CART_STORAGE_DIR", DEFAULT_STORAGE_DIR),
            redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
            redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
            language=os.environ.get("CART_LANGUAGE", "en"),
            telegram_token=os.environ.get("TELEGRAM_TOKEN", ""),
            telegram_chat_id=os.environ.get("TELEGRAM_CHAT_ID") or None,
        )
        if overrides:
            settings = replace(settings, **overrides)
        return settings
