"""Destination Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Destination(ABC):
    """Uniform delivery contract: text or image-with-caption."""

    label: str = "destination"

    @abstractmethod
    def send_text(self, text: str) -> None:
        """Deliver a text-only message."""

    @abstractmethod
    def send_photo(self, image_url: str, caption: str) -> None:
        """Deliver an image with a caption."""

    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["Destination"]
