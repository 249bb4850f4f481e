"""Message layout shared by text and photo deliveries."""

from __future__ import annotations

import html

from ..item import Item

CAPTION_LIMIT = 1024
MESSAGE_LIMIT = 4096
ELLIPSIS = "…"

# shortened first to last when a message runs over its limit
_SHRINK_ORDER = ("summary", "translated", "title")


def format_message(item: Item, limit: int = MESSAGE_LIMIT, parse_mode: str = "HTML") -> str:
    """Render title, translated title, optional translated summary and link.

    Sections are separated by one blank line. When the result exceeds ``limit``
    the summary is shortened first, then the translated title, then the title
    itself. Text is cut before escaping so tags and entities stay whole.
    """

    markup = parse_mode == "HTML"
    escape = html.escape if markup else _identity
    fields: dict[str, str | None] = {
        "title": item.title,
        "translated": item.translated_title or item.title,
        "summary": item.translated_summary or item.summary,
        "link": item.link,
    }

    def _render() -> str:
        title = escape(fields["title"])
        sections = [f"📰 <b>{title}</b>" if markup else f"📰 {title}"]
        sections.append(f"🔰 {escape(fields['translated'])}")
        if fields["summary"]:
            sections.append(f"📌 {escape(fields['summary'])}")
        if fields["link"]:
            sections.append(f"🔗 {escape(fields['link'])}")
        return "\n\n".join(sections)

    text = _render()
    for name in _SHRINK_ORDER:
        overflow = len(text) - limit
        if overflow <= 0:
            return text
        value = fields[name]
        if not value:
            continue
        shrunk = _shrink(value, len(escape(value)) - overflow, escape)
        fields[name] = shrunk if name == "summary" else (shrunk or ELLIPSIS)
        text = _render()
    if len(text) > limit and fields["link"]:
        # a link cannot be shortened without breaking it
        fields["link"] = None
        text = _render()
    return text


def _identity(text: str) -> str:
    return text


def _shrink(text: str, budget: int, escape) -> str | None:
    """Cut ``text`` so that its escaped form fits in ``budget`` characters."""

    if budget <= len(ELLIPSIS):
        return None
    candidate = text[: budget - len(ELLIPSIS)]
    while candidate and len(escape(candidate)) + len(ELLIPSIS) > budget:
        candidate = candidate[:-1]
    candidate = candidate.rstrip()
    return f"{candidate}{ELLIPSIS}" if candidate else None


__all__ = ["CAPTION_LIMIT", "MESSAGE_LIMIT", "format_message"]
