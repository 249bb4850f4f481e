"""Fan-out delivery to every configured destination with failure isolation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import structlog

from ...errors import DeliveryError
from ..item import Item
from .base import Destination
from .bot_api import BotApiClient, BotApiDestination
from .formatting import CAPTION_LIMIT, MESSAGE_LIMIT, format_message


@dataclass
class DeliveryReport:
    """Outcome of delivering one item to all destinations."""

    delivered: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def attempted(self) -> int:
        return len(self.delivered) + len(self.failed)

    @property
    def any_delivered(self) -> bool:
        return bool(self.delivered)


class DeliverySink:
    """Deliver items to several destinations; one failing never blocks the others."""

    def __init__(
        self,
        destinations: Sequence[Destination],
        parse_mode: str = "HTML",
        photo_fallback_to_text: bool = True,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.destinations = list(destinations)
        self.parse_mode = parse_mode
        self.photo_fallback_to_text = photo_fallback_to_text
        self.logger = logger or structlog.get_logger("news_relay").bind(component="delivery")

    def deliver(self, item: Item) -> DeliveryReport:
        report = DeliveryReport()
        text = format_message(item, MESSAGE_LIMIT, self.parse_mode)
        caption = format_message(item, CAPTION_LIMIT, self.parse_mode) if item.image_url else ""
        for destination in self.destinations:
            try:
                if item.image_url:
                    self._send_photo(destination, item, caption, text)
                else:
                    destination.send_text(text)
            except Exception as exc:  # noqa: BLE001
                self._record_failure(report, destination, item, exc)
            else:
                report.delivered.append(destination.label)
                self.logger.info("item_delivered", destination=destination.label, title=item.title)
        return report

    def broadcast(self, text: str) -> DeliveryReport:
        report = DeliveryReport()
        for destination in self.destinations:
            try:
                destination.send_text(text)
            except Exception as exc:  # noqa: BLE001
                self._record_failure(report, destination, None, exc)
            else:
                report.delivered.append(destination.label)
        return report

    def close(self) -> None:
        for destination in self.destinations:
            destination.close()

    def _send_photo(self, destination: Destination, item: Item, caption: str, text: str) -> None:
        try:
            destination.send_photo(item.image_url, caption)
        except DeliveryError as exc:
            if not self.photo_fallback_to_text:
                raise
            self.logger.warning(
                "photo_delivery_failed_fallback_text",
                destination=destination.label,
                title=item.title,
                image_url=item.image_url,
                error=exc.message,
            )
            destination.send_text(text)

    def _record_failure(
        self, report: DeliveryReport, destination: Destination, item: Item | None, exc: Exception
    ) -> None:
        message = exc.message if isinstance(exc, DeliveryError) else str(exc)
        details = exc.details if isinstance(exc, DeliveryError) else {}
        report.failed[destination.label] = message
        self.logger.error(
            "delivery_failed",
            destination=destination.label,
            title=item.title if item else None,
            error=message,
            details=details,
        )


class SinkFactory:
    """Build the destination list for a delivery target.

    A target is a direct chat id served by the primary transport; the broadcast
    channel is appended whenever one is configured. ``None`` means broadcast only.
    """

    def __init__(
        self,
        primary_client: BotApiClient,
        broadcast_client: BotApiClient | None,
        channel_id: str = "",
        parse_mode: str = "HTML",
        photo_fallback_to_text: bool = True,
        disable_web_page_preview: bool = False,
    ) -> None:
        self.primary_client = primary_client
        self.broadcast_client = broadcast_client
        self.channel_id = channel_id
        self.parse_mode = parse_mode
        self.photo_fallback_to_text = photo_fallback_to_text
        self.disable_web_page_preview = disable_web_page_preview

    def __call__(self, target: str | None) -> DeliverySink:
        destinations: list[Destination] = []
        if target:
            destinations.append(self._destination(self.primary_client, target, f"recipient:{target}"))
        if self.channel_id and self.broadcast_client is not None:
            destinations.append(self._destination(self.broadcast_client, self.channel_id, "channel"))
        return DeliverySink(
            destinations,
            parse_mode=self.parse_mode,
            photo_fallback_to_text=self.photo_fallback_to_text,
        )

    def close(self) -> None:
        self.primary_client.close()
        if self.broadcast_client is not None:
            self.broadcast_client.close()

    def _destination(self, client: BotApiClient, chat_id: str, label: str) -> BotApiDestination:
        return BotApiDestination(
            client,
            chat_id,
            label,
            parse_mode=self.parse_mode,
            disable_web_page_preview=self.disable_web_page_preview,
        )


__all__ = ["DeliveryReport", "DeliverySink", "SinkFactory"]
