"""Exception hierarchy shared across the relay pipeline."""

from __future__ import annotations

from typing import Any


class RelayError(Exception):
    """Base exception for news-relay."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FetchError(RelayError):
    """Source page could not be retrieved."""


class TranslationError(RelayError):
    """Translation service failed or returned nothing usable."""


class DeliveryError(RelayError):
    """A destination rejected or could not receive a message."""


class DedupStoreError(RelayError):
    """Dedup store I/O failure; fatal for the current pass."""


__all__ = [
    "DedupStoreError",
    "DeliveryError",
    "FetchError",
    "RelayError",
    "TranslationError",
]
