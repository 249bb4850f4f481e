"""Canonical news item flowing through the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(slots=True)
class Item:
    """A single news entry as produced by the source adapter."""

    title: str
    link: str | None = None
    summary: str | None = None
    image_url: str | None = None
    translated_title: str | None = None
    translated_summary: str | None = None

    def __post_init__(self) -> None:
        self.title = (self.title or "").strip()
        self.link = _blank_to_none(self.link)
        self.summary = _blank_to_none(self.summary)
        self.image_url = _blank_to_none(self.image_url)

    def is_valid(self) -> bool:
        return bool(self.title)

    def with_translation(
        self, translated_title: str | None, translated_summary: str | None = None
    ) -> "Item":
        return replace(
            self,
            translated_title=translated_title,
            translated_summary=translated_summary,
        )


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


__all__ = ["Item"]
