"""Pytest configuration providing shared fixtures."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from news_relay.config import (
    BroadcastConfig,
    ConfigLocator,
    ConfigRepository,
    RelayConfig,
    RetentionConfig,
    ScheduleConfig,
)
from news_relay.engine import DedupStore, DeliverySink, Destination, Enricher
from news_relay.infra import SQLiteManager
from news_relay.orchestrator import Orchestrator

from stubs import EchoTranslator, RecordingDestination, StepClock


def pytest_configure(config: pytest.Config) -> None:  # pragma: no cover
    # keep log files out of the working tree
    if "NEWS_RELAY_HOME" not in os.environ:
        home = Path(config.rootpath) / ".pytest_home"
        home.mkdir(parents=True, exist_ok=True)
        os.environ["NEWS_RELAY_HOME"] = str(home)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def store(tmp_path: Path, clock: StepClock) -> DedupStore:
    manager = SQLiteManager()
    yield DedupStore(manager, tmp_path / "articles.db", now=clock)
    manager.close_all()


@pytest.fixture
def relay_config() -> Callable[..., RelayConfig]:
    def _builder(**overrides: Any) -> RelayConfig:
        base: dict[str, Any] = {
            "schedule": ScheduleConfig(interval_seconds=300),
            "retention": RetentionConfig(max_count=1000, store_path="data/test.db"),
            "broadcast_bot": BroadcastConfig(channel_id="@channel"),
        }
        base.update(overrides)
        return RelayConfig(**base)

    return _builder


@pytest.fixture
def build_orchestrator(store: DedupStore, relay_config) -> Callable[..., Orchestrator]:
    def _builder(
        source: Any,
        destinations: list[Destination] | None = None,
        translator: Any | None = None,
        config: RelayConfig | None = None,
        scheduler: Any | None = None,
        dedup_store: Any | None = None,
        sink_factory: Callable[[str | None], DeliverySink] | None = None,
    ) -> Orchestrator:
        dests = destinations if destinations is not None else [RecordingDestination()]
        return Orchestrator(
            config=config or relay_config(),
            store=dedup_store or store,
            source=source,
            enricher=Enricher(translator or EchoTranslator()),
            sink_factory=sink_factory or (lambda _target: DeliverySink(dests)),
            scheduler=scheduler,
        )

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("NEWS_RELAY_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator, environ={})
    yield repository
