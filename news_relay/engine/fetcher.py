"""HTTP fetching for the listing page."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict

import httpx
import structlog

from ..config import SourceConfig
from ..errors import FetchError


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)


class Fetcher:
    """GET a page with a browser-like User-Agent and a bounded retry loop."""

    def __init__(
        self,
        source: SourceConfig,
        logger: structlog.BoundLogger | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep=time.sleep,
    ) -> None:
        self.source = source
        self.logger = logger or structlog.get_logger("news_relay.fetcher")
        self._sleep = sleep
        self._client = httpx.Client(
            follow_redirects=True,
            timeout=source.timeout,
            headers={"User-Agent": source.user_agent},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *_exc) -> None:
        self.close()

    def fetch(self, url: str | None = None) -> FetchResponse:
        target = url or self.source.url
        max_attempts = self.source.retry_on_fail + 1
        last_error: Exception | None = None
        for attempt in range(1, max_attempts + 1):
            try:
                response = self._client.get(target)
                if self._is_failure(response):
                    last_error = RuntimeError(f"Unexpected status {response.status_code}")
                    self.logger.warning(
                        "fetch_bad_status",
                        url=target,
                        attempt=attempt,
                        status=response.status_code,
                    )
                else:
                    return FetchResponse(
                        url=str(response.url),
                        status_code=response.status_code,
                        text=response.text,
                        headers=dict(response.headers),
                        raw=response,
                    )
            except httpx.HTTPError as exc:
                self.logger.warning("fetch_error", url=target, attempt=attempt, error=str(exc))
                last_error = exc
            if attempt < max_attempts and self.source.retry_delay:
                self._sleep(min(self.source.retry_delay, 30.0))

        raise FetchError(
            f"Fetch failed after {max_attempts} attempts: {target}",
            {"error": str(last_error)},
        ) from last_error

    @staticmethod
    def _is_failure(response: httpx.Response) -> bool:
        return response.status_code >= 400


__all__ = ["Fetcher", "FetchResponse"]
