"""
Cart Notifiers - fire-and-forget sinks for user-facing error messages.

The engine calls ``notifier.error(message)`` after a failed operation and never
uses the return value. Notifiers may be sync or async.
"""

import asyncio
from typing import Awaitable, List, Optional, Protocol, Union

import httpx

from storefront.config import CartSettings
from storefront.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

PERMANENT_ERROR_CODES = {400, 403, 404}
TELEGRAM_MAX_LENGTH = 4096


class Notifier(Protocol):
    def error(self, message: str) -> Union[None, Awaitable[None]]: ...


class LogNotifier:
    """Writes user-facing messages to the log (default when no UI is attached)."""

    def __init__(self, name: str = "storefront.user"):
        self._logger = get_logger(name)

    def error(self, message: str) -> None:
        self._logger.warning(sanitize_string_for_logging(message, max_length=200))


class RecordingNotifier:
    """Keeps messages in memory; a UI can poll ``messages`` to render toasts."""

    def __init__(self):
        self.messages: List[str] = []

    def error(self, message: str) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.messages.clear()


def _calculate_backoff_delay(attempt: int) -> float:
    """Exponential backoff delay."""
    return float(0.5 * (2 ** attempt))


def _truncate_message(text: str, max_length: int = TELEGRAM_MAX_LENGTH) -> str:
    """Truncate message to Telegram's limit."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


class TelegramNotifier:
    """
    Sends cart error messages to a Telegram chat through the Bot API.

    Delivery problems are logged and swallowed: a notification must never
    turn into a cart failure.
    """

    def __init__(
        self,
        token: str,
        chat_id: Union[int, str],
        retries: int = 2,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not token:
            raise ValueError("TELEGRAM_TOKEN must be set for TelegramNotifier")
        self.url = f"https://api.telegram.org/bot{token}/sendMessage"
        self.chat_id = chat_id
        self.retries = retries
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(cls, settings: CartSettings) -> "TelegramNotifier":
        return cls(settings.telegram_token, settings.telegram_chat_id)

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def error(self, message: str) -> None:
        await self.send(message)

    async def send(self, text: str) -> bool:
        """Send a message with retry logic. Returns True on delivery."""
        payload = {"chat_id": self.chat_id, "text": _truncate_message(text)}
        client = await self._get_http_client()
        last_error = None

        for attempt in range(self.retries + 1):
            try:
                response = await client.post(self.url, json=payload, timeout=self.timeout)
                if response.status_code == 200:
                    logger.debug(f"Notification sent to chat {self.chat_id}")
                    return True

                last_error = f"HTTP {response.status_code}"
                logger.warning(f"Telegram API error for chat {self.chat_id}: {last_error}")
                if response.status_code in PERMANENT_ERROR_CODES:
                    return False
            except httpx.TimeoutException:
                last_error = "Timeout"
                logger.warning(f"Timeout sending notification (attempt {attempt + 1}/{self.retries + 1})")
            except httpx.HTTPError as e:
                last_error = str(e)
                logger.warning(f"Connection error sending notification: {e}")

            if attempt < self.retries:
                await asyncio.sleep(_calculate_backoff_delay(attempt))

        logger.error(f"Failed to send notification after {self.retries + 1} attempts: {last_error}")
        return False

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None


def build_notifier(settings: CartSettings) -> Notifier:
    """Telegram when configured, otherwise the log."""
    if settings.telegram_enabled:
        return TelegramNotifier.from_settings(settings)
    return LogNotifier()
