"""Telegram Bot API transport: sendMessage and getUpdates long-polling."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from src.errors import TelegramError

logger = logging.getLogger(__name__)

# Extra HTTP timeout on top of the long-poll window so the server answers first
LONG_POLL_GRACE = 5.0


@dataclass(frozen=True)
class InboundCommand:
    """One update received from getUpdates.

    Updates that carry no message (edits, callbacks, ...) have no sender
    and an empty text; they still advance the offset cursor.
    """

    sequence_token: int
    sender_id: Optional[str]
    text: str


def parse_update(update: Dict[str, Any]) -> InboundCommand:
    """Convert a raw getUpdates entry into an InboundCommand."""
    message = update.get("message")
    if not message:
        return InboundCommand(sequence_token=int(update["update_id"]), sender_id=None, text="")

    chat = message.get("chat") or {}
    chat_id = chat.get("id")
    return InboundCommand(
        sequence_token=int(update["update_id"]),
        sender_id=str(chat_id) if chat_id is not None else None,
        text=(message.get("text") or "").strip(),
    )


class TelegramClient:
    """Minimal async client for the two Bot API methods the monitor needs."""

    def __init__(
        self,
        bot_token: str,
        api_url: str = "https://api.telegram.org",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.bot_token = bot_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient()

    def _method_url(self, method: str) -> str:
        return f"{self.api_url}/bot{self.bot_token}/{method}"

    def _redact(self, text: str) -> str:
        """Strip the bot token from error text (it is part of every URL)."""
        if self.bot_token:
            return text.replace(self.bot_token, "<redacted>")
        return text

    async def send_message(self, chat_id: str, text: str) -> None:
        """Send a text message.

        Raises:
            TelegramError: Transport failure or non-200 response.
        """
        try:
            response = await self._client.post(
                self._method_url("sendMessage"),
                json={"chat_id": chat_id, "text": text},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise TelegramError(self._redact(f"{type(e).__name__}: {e}")) from None

        if response.status_code != 200:
            raise TelegramError(
                f"Telegram API returned status {response.status_code}",
                status_code=response.status_code,
            )

    async def get_updates(self, offset: int, timeout: int = 30) -> List[InboundCommand]:
        """Long-poll for updates with update_id >= offset.

        Args:
            offset: First update_id not yet consumed.
            timeout: Seconds the server may hold the request open.

        Returns:
            Updates in arrival order.

        Raises:
            TelegramError: Transport failure, non-200, or malformed payload.
        """
        try:
            response = await self._client.get(
                self._method_url("getUpdates"),
                params={"offset": offset, "timeout": timeout},
                timeout=timeout + LONG_POLL_GRACE,
            )
        except httpx.HTTPError as e:
            raise TelegramError(self._redact(f"{type(e).__name__}: {e}")) from None

        if response.status_code != 200:
            raise TelegramError(
                f"Telegram API returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TelegramError(f"Malformed getUpdates response: {e}") from None

        if not isinstance(data, dict):
            raise TelegramError(f"Malformed getUpdates response: expected an object, got {type(data).__name__}")

        if not data.get("ok"):
            raise TelegramError(f"getUpdates failed: {data.get('description', 'unknown error')}")

        result = data.get("result", [])
        if not isinstance(result, list):
            raise TelegramError(f"Malformed getUpdates response: result is {type(result).__name__}, not a list")

        try:
            return [parse_update(update) for update in result]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TelegramError(f"Malformed update in getUpdates response: {e}") from None

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
