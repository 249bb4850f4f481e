"""Source adapter: fetch + parse, never raising into the pipeline."""

from __future__ import annotations

from typing import Protocol

import structlog

from ..config import SourceConfig
from ..errors import FetchError
from .fetcher import Fetcher
from .item import Item
from .parser import Parser


class ItemSource(Protocol):
    def fetch_items(self) -> list[Item]: ...


class NewsSource:
    """Fetch the configured listing page and normalise it into items.

    Any network or parse failure is logged and reported as an empty result;
    the orchestrator treats "no items" and "fetch failed" the same way.
    """

    def __init__(
        self,
        config: SourceConfig,
        fetcher: Fetcher | None = None,
        parser: Parser | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("news_relay").bind(component="source")
        self.fetcher = fetcher or Fetcher(config, logger=self.logger)
        self.parser = parser or Parser(config.selectors, require_link=config.require_link)

    def fetch_items(self) -> list[Item]:
        try:
            response = self.fetcher.fetch()
        except FetchError as exc:
            self.logger.error("source_fetch_failed", url=self.config.url, error=exc.message, details=exc.details)
            return []
        try:
            items = self.parser.parse_items(response.text, response.url)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("source_parse_failed", url=response.url, error=str(exc))
            return []
        items = [item for item in items if item.is_valid()]
        self.logger.info("source_fetched", url=response.url, items=len(items))
        return items

    def close(self) -> None:
        self.fetcher.close()


__all__ = ["ItemSource", "NewsSource"]
