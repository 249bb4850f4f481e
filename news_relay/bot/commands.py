"""Inbound bot command recognition."""

from __future__ import annotations

from typing import Any, Callable

import structlog

from ..engine.delivery import BotApiClient
from ..errors import DeliveryError
from ..logging_conf import get_logger

WELCOME_TEMPLATE = "Welcome! I will send you new articles every {interval}."


def _format_interval(seconds: float) -> str:
    if seconds % 3600 == 0:
        hours = int(seconds // 3600)
        return f"{hours} hour" + ("s" if hours != 1 else "")
    if seconds % 60 == 0:
        minutes = int(seconds // 60)
        return f"{minutes} minute" + ("s" if minutes != 1 else "")
    return f"{seconds:g} seconds"


def parse_command(text: str | None) -> str | None:
    """Return the bare command name (``/start@bot arg`` -> ``start``)."""

    if not text or not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0][1:]
    name = head.split("@", 1)[0].lower()
    return name or None


class CommandRouter:
    """Map ``/start`` and ``/test`` messages onto orchestrator actions."""

    def __init__(
        self,
        orchestrator,
        client: BotApiClient,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.client = client
        self.logger = logger or get_logger("commands")
        self._handlers: dict[str, Callable[[str], None]] = {
            "start": self.handle_start,
            "test": self.handle_test,
        }

    def handle_update(self, update: dict[str, Any]) -> str | None:
        message = update.get("message") or update.get("channel_post") or {}
        chat = message.get("chat") or {}
        chat_id = chat.get("id")
        command = parse_command(message.get("text"))
        if chat_id is None or command is None:
            return None
        handler = self._handlers.get(command)
        if handler is None:
            self.logger.info("command_ignored", command=command, chat_id=str(chat_id))
            return None
        self.logger.info("command_received", command=command, chat_id=str(chat_id))
        handler(str(chat_id))
        return command

    def handle_start(self, chat_id: str) -> None:
        interval = self.orchestrator.config.schedule.interval_seconds
        self._reply(chat_id, WELCOME_TEMPLATE.format(interval=_format_interval(interval)))
        self.orchestrator.schedule_target(chat_id, run_now=True)

    def handle_test(self, chat_id: str) -> None:
        self.orchestrator.broadcast_test(chat_id)

    def _reply(self, chat_id: str, text: str) -> None:
        try:
            self.client.call("sendMessage", {"chat_id": chat_id, "text": text})
        except DeliveryError as exc:
            self.logger.error("reply_failed", chat_id=chat_id, error=exc.message, details=exc.details)


__all__ = ["CommandRouter", "WELCOME_TEMPLATE", "parse_command"]
