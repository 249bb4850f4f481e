"""Enrichment stage: attach translations, never failing the item."""

from __future__ import annotations

from typing import Protocol

import structlog

from ..errors import TranslationError
from .item import Item


class TextTranslator(Protocol):
    def translate(self, text: str) -> str: ...


class Enricher:
    """Populate ``translated_title``/``translated_summary`` with fallback to the original."""

    def __init__(self, translator: TextTranslator, logger: structlog.BoundLogger | None = None) -> None:
        self.translator = translator
        self.logger = logger or structlog.get_logger("news_relay").bind(component="enricher")

    def enrich(self, item: Item) -> Item:
        translated_title = self._translate_field(item, "title", item.title)
        translated_summary = None
        if item.summary:
            translated_summary = self._translate_field(item, "summary", item.summary)
        return item.with_translation(translated_title, translated_summary)

    def _translate_field(self, item: Item, field: str, text: str) -> str:
        try:
            return self.translator.translate(text)
        except TranslationError as exc:
            self.logger.warning(
                "translation_failed",
                title=item.title,
                field=field,
                error=exc.message,
                details=exc.details,
            )
        except Exception as exc:  # noqa: BLE001
            self.logger.warning(
                "translation_failed", title=item.title, field=field, error=str(exc)
            )
        return text


__all__ = ["Enricher", "TextTranslator"]
