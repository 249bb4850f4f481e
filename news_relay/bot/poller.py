"""Long-polling ``getUpdates`` loop feeding the command router."""

from __future__ import annotations

from threading import Event

import structlog

from ..engine.delivery import BotApiClient
from ..errors import DeliveryError
from ..logging_conf import get_logger
from .commands import CommandRouter


class UpdatePoller:
    """Fetch updates with a moving offset and dispatch each one once."""

    def __init__(
        self,
        client: BotApiClient,
        router: CommandRouter,
        poll_timeout: int = 30,
        error_backoff: float = 5.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.client = client
        self.router = router
        self.poll_timeout = poll_timeout
        self.error_backoff = error_backoff
        self.logger = logger or get_logger("poller")
        self.offset: int | None = None

    def poll_once(self) -> int:
        payload: dict = {"timeout": self.poll_timeout, "allowed_updates": ["message", "channel_post"]}
        if self.offset is not None:
            payload["offset"] = self.offset
        updates = self.client.call("getUpdates", payload, timeout=self.poll_timeout + 10) or []
        handled = 0
        for update in updates:
            if not isinstance(update, dict):
                self.logger.warning("update_malformed", update=repr(update)[:200])
                continue
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                self.offset = update_id + 1
            try:
                if self.router.handle_update(update):
                    handled += 1
            except Exception:  # noqa: BLE001
                self.logger.exception("update_handling_failed", update_id=update_id)
        return handled

    def run_forever(self, stop: Event) -> None:
        self.logger.info("poller_started")
        while not stop.is_set():
            try:
                self.poll_once()
            except DeliveryError as exc:
                self.logger.warning("get_updates_failed", error=exc.message, details=exc.details)
                stop.wait(self.error_backoff)
        self.logger.info("poller_stopped")


__all__ = ["UpdatePoller"]
