"""
Logging for the storefront cart.

All modules log through ``get_logger(__name__)``; the first call installs a
stdout handler on the ``storefront`` logger unless the application has
already configured one. Level comes from CART_LOG_LEVEL (then LOG_LEVEL).

Values that originate outside the process (product ids, remote error text,
file paths) go through ``sanitize_*`` before being interpolated, so a crafted
payload cannot forge extra log lines.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ROOT = "storefront"
_UNSAFE = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach the package handler once and (re)apply the level."""
    name = level or os.environ.get("CART_LOG_LEVEL") or os.environ.get("LOG_LEVEL", "INFO")
    package_logger = logging.getLogger(_ROOT)
    package_logger.setLevel(getattr(logging, name.upper(), logging.INFO))

    if not package_logger.handlers and not logging.getLogger().handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        # Inventory calls go through httpx; its per-request lines are noise at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)

    return package_logger


@cache
def _configure_once() -> None:
    configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    _configure_once()
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: object) -> str:
    """Integer ids are logged as-is; anything else is escaped and cut to 8 chars."""
    if id_value is None or id_value == "":
        return "N/A"
    if isinstance(id_value, int):
        return str(id_value)
    return str(id_value).translate(_UNSAFE)[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    if not value:
        return "N/A"
    safe_value = str(value).translate(_UNSAFE)
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
