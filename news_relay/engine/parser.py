"""DOM parsing of the listing page into items."""

from __future__ import annotations

from urllib.parse import urljoin

from selectolax.parser import HTMLParser, Node

from ..config import SelectorConfig
from .item import Item


class Parser:
    """Lift items out of listing markup according to the configured selectors."""

    def __init__(self, selectors: SelectorConfig | None = None, require_link: bool = True) -> None:
        self.selectors = selectors or SelectorConfig()
        self.require_link = require_link

    def parse_items(self, html: str, base_url: str) -> list[Item]:
        parser = HTMLParser(html)
        items: list[Item] = []
        seen: set[str] = set()
        for node in parser.css(self.selectors.container):
            item = self._parse_container(node, base_url)
            if item is None or item.title in seen:
                continue
            seen.add(item.title)
            items.append(item)
        return items

    def _parse_container(self, node: Node, base_url: str) -> Item | None:
        title_node = node.css_first(self.selectors.title)
        if title_node is None:
            return None
        title = title_node.text(separator=" ", strip=True)
        href = (title_node.attributes.get("href") or "").strip()
        link = urljoin(base_url, href) if href and not href.startswith(("javascript:", "#")) else None
        if not title or (self.require_link and not link):
            return None

        image_url = None
        image_node = node.css_first(self.selectors.image) if self.selectors.image else None
        if image_node is not None:
            src = (image_node.attributes.get("src") or "").strip()
            if src and not src.startswith("data:"):
                image_url = urljoin(base_url, src)

        summary = None
        summary_node = node.css_first(self.selectors.summary) if self.selectors.summary else None
        if summary_node is not None:
            summary = summary_node.text(separator=" ", strip=True) or None

        return Item(title=title, link=link, summary=summary, image_url=image_url)


__all__ = ["Parser"]
