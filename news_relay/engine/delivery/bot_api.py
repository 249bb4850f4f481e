"""Bot-API (Telegram/Bale compatible) destination over httpx."""

from __future__ import annotations

from typing import Any

import httpx

from ...config import BotConfig
from ...errors import DeliveryError
from .base import Destination


class BotApiClient:
    """Minimal JSON client for ``{api_base}/bot{token}/{method}``."""

    def __init__(self, config: BotConfig, transport: httpx.BaseTransport | None = None) -> None:
        self.config = config
        self._client = httpx.Client(timeout=config.timeout, transport=transport)

    def call(self, method: str, payload: dict[str, Any], timeout: float | None = None) -> Any:
        if not self.config.token:
            raise DeliveryError("Bot token is not configured", {"method": method})
        url = f"{self.config.api_base.rstrip('/')}/bot{self.config.token}/{method}"
        try:
            response = self._client.post(url, json=payload, timeout=timeout or self.config.timeout)
        except httpx.HTTPError as exc:
            raise DeliveryError(
                f"{method} request failed", {"method": method, "error": str(exc)}
            ) from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise DeliveryError(
                f"{method} returned non-JSON body",
                {"method": method, "status": response.status_code},
            ) from exc
        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise DeliveryError(
                f"{method} rejected",
                {"method": method, "status": response.status_code, "description": description},
            )
        return data.get("result")

    def close(self) -> None:
        self._client.close()


class BotApiDestination(Destination):
    """Deliver to one chat id through a Bot-API client."""

    def __init__(
        self,
        client: BotApiClient,
        chat_id: str,
        label: str,
        parse_mode: str = "HTML",
        disable_web_page_preview: bool = False,
    ) -> None:
        self.client = client
        self.chat_id = chat_id
        self.label = label
        self.parse_mode = parse_mode
        self.disable_web_page_preview = disable_web_page_preview

    def send_text(self, text: str) -> None:
        payload: dict[str, Any] = {
            "chat_id": self._require_chat(),
            "text": text,
            "disable_web_page_preview": self.disable_web_page_preview,
        }
        if self.parse_mode:
            payload["parse_mode"] = self.parse_mode
        self.client.call("sendMessage", payload)

    def send_photo(self, image_url: str, caption: str) -> None:
        payload: dict[str, Any] = {
            "chat_id": self._require_chat(),
            "photo": image_url,
            "caption": caption,
        }
        if self.parse_mode:
            payload["parse_mode"] = self.parse_mode
        self.client.call("sendPhoto", payload)

    def _require_chat(self) -> str:
        if not self.chat_id:
            raise DeliveryError("Destination chat id is not configured", {"label": self.label})
        return self.chat_id


__all__ = ["BotApiClient", "BotApiDestination"]
