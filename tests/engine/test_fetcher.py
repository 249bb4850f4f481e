from __future__ import annotations

import httpx
import pytest

from news_relay.config import SourceConfig
from news_relay.engine import Fetcher, NewsSource
from news_relay.errors import FetchError

PAGE = """
<div class="post-item">
  <div class="post-title"><a href="/a">A</a></div>
  <div class="feature-image"><img src="/img/a.png"></div>
</div>
<div class="post-item">
  <div class="post-title"><a href="http://x/b">B</a></div>
  <div class="post-summary">s</div>
</div>
"""


def _source(**overrides) -> SourceConfig:
    base = {"url": "https://news.example/", "retry_on_fail": 1, "retry_delay": 0.5}
    base.update(overrides)
    return SourceConfig(**base)


def test_fetcher_sends_user_agent_and_returns_body() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["ua"] = request.headers.get("User-Agent")
        return httpx.Response(200, text="payload")

    config = _source()
    with Fetcher(config, transport=httpx.MockTransport(handler)) as fetcher:
        response = fetcher.fetch()

    assert response.status_code == 200
    assert response.text == "payload"
    assert response.url == "https://news.example/"
    assert captured["ua"] == config.user_agent


def test_fetcher_retries_then_succeeds() -> None:
    attempts = {"count": 0}
    sleeps: list[float] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts["count"] += 1
        if attempts["count"] == 1:
            return httpx.Response(503)
        return httpx.Response(200, text="ok")

    fetcher = Fetcher(_source(), transport=httpx.MockTransport(handler), sleep=sleeps.append)
    assert fetcher.fetch().text == "ok"
    assert attempts["count"] == 2
    assert sleeps == [0.5]
    fetcher.close()


def test_fetcher_raises_after_exhausting_attempts() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    fetcher = Fetcher(_source(retry_on_fail=2), transport=httpx.MockTransport(handler), sleep=lambda _s: None)
    with pytest.raises(FetchError) as excinfo:
        fetcher.fetch()
    assert "3 attempts" in excinfo.value.message
    fetcher.close()


def test_news_source_parses_items() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text=PAGE))
    config = _source()
    source = NewsSource(config, fetcher=Fetcher(config, transport=transport))

    items = source.fetch_items()
    source.close()

    assert [item.title for item in items] == ["A", "B"]
    assert items[0].link == "https://news.example/a"
    assert items[0].image_url == "https://news.example/img/a.png"
    assert items[1].summary == "s"


def test_news_source_returns_empty_on_failure() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(500))
    config = _source(retry_on_fail=0)
    source = NewsSource(config, fetcher=Fetcher(config, transport=transport))
    assert source.fetch_items() == []


def test_news_source_returns_empty_on_parse_failure() -> None:
    class ExplodingParser:
        def parse_items(self, html, base_url):
            raise RuntimeError("bad markup")

    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    config = _source()
    source = NewsSource(config, fetcher=Fetcher(config, transport=transport), parser=ExplodingParser())
    assert source.fetch_items() == []
