"""Stub collaborators shared by the test-suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable

from news_relay.engine import Destination, Item
from news_relay.errors import DeliveryError, TranslationError


class StepClock:
    """Deterministic clock advancing by ``step`` on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


class StubSource:
    """Returns a queued list of items per call; ``[]`` once the queue is drained."""

    def __init__(self, *batches: Iterable[Item]) -> None:
        self.batches = [list(batch) for batch in batches]
        self.calls = 0

    def fetch_items(self) -> list[Item]:
        self.calls += 1
        if not self.batches:
            return []
        return self.batches.pop(0)


class EchoTranslator:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def translate(self, text: str) -> str:
        self.calls.append(text)
        return f"fa:{text}"


class FailingTranslator:
    def __init__(self, fail_on: Callable[[str], bool] = lambda _text: True) -> None:
        self.fail_on = fail_on

    def translate(self, text: str) -> str:
        if self.fail_on(text):
            raise TranslationError("service unavailable")
        return f"fa:{text}"


class RecordingDestination(Destination):
    def __init__(self, label: str = "recorder") -> None:
        self.label = label
        self.texts: list[str] = []
        self.photos: list[tuple[str, str]] = []

    def send_text(self, text: str) -> None:
        self.texts.append(text)

    def send_photo(self, image_url: str, caption: str) -> None:
        self.photos.append((image_url, caption))


class FailingDestination(Destination):
    def __init__(self, label: str = "broken") -> None:
        self.label = label
        self.attempts = 0

    def send_text(self, text: str) -> None:
        self.attempts += 1
        raise DeliveryError("chat not found", {"label": self.label})

    def send_photo(self, image_url: str, caption: str) -> None:
        self.attempts += 1
        raise DeliveryError("chat not found", {"label": self.label})
