"""Pipeline orchestrator wiring together source, dedup, enrichment and delivery."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from threading import Lock
from typing import Callable

import structlog

from .config import RelayConfig
from .engine import DedupRecord, DedupStore, DeliveryReport, DeliverySink, Enricher, Item, ItemSource
from .errors import DedupStoreError
from .logging_conf import get_logger, pass_context
from .scheduler import BROADCAST_TARGET

TEST_BROADCAST_TEXT = "✅ news-relay test broadcast: delivery is configured correctly."


class PassState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    FILTERING = "filtering"
    DELIVERING = "delivering"
    TRIMMING = "trimming"


@dataclass
class PassSummary:
    """Counters describing one pipeline pass."""

    target: str | None = None
    fetched: int = 0
    skipped: int = 0
    delivered: int = 0
    undelivered: int = 0
    committed: int = 0
    destination_failures: int = 0
    trimmed: int = 0
    dropped: bool = False
    aborted: bool = False
    error: str | None = None
    state: PassState = PassState.IDLE

    def as_dict(self) -> dict:
        payload = asdict(self)
        payload["state"] = self.state.value
        return payload


class Orchestrator:
    """Central coordinator running fetch → filter → enrich → deliver → commit → trim."""

    def __init__(
        self,
        config: RelayConfig,
        store: DedupStore,
        source: ItemSource,
        enricher: Enricher,
        sink_factory: Callable[[str | None], DeliverySink],
        scheduler=None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.source = source
        self.enricher = enricher
        self.sink_factory = sink_factory
        self.scheduler = scheduler
        self.logger = logger or get_logger("orchestrator")
        self._locks: dict[str, Lock] = {}
        self._locks_guard = Lock()

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def schedule_target(self, target: str | None, run_now: bool = True) -> str:
        if self.scheduler is None:
            raise RuntimeError("Orchestrator was created without a scheduler")
        job_id = self.scheduler.schedule_target(
            target, self.config.schedule, self.trigger, run_now=run_now
        )
        self.scheduler.start()
        return job_id

    def unschedule_target(self, target: str | None) -> None:
        if self.scheduler is not None:
            self.scheduler.remove_target(target)

    def trigger(self, target: str | None = None) -> PassSummary | None:
        """Scheduler/command callback: run a pass and keep the process alive on bugs."""

        try:
            return self.run_pass(target)
        except Exception:  # noqa: BLE001
            self.logger.exception("pass_crashed", target=target or BROADCAST_TARGET)
            return None

    def run_pass(self, target: str | None = None) -> PassSummary:
        """Run one pass for ``target``; drop it if it overlaps a pass in flight.

        Two passes overlap when they share the target or any destination, so
        recipients that all fan out to the broadcast channel run one at a time.
        """

        sink = self.sink_factory(target)
        if not sink.destinations:
            self.logger.warning("pass_skipped_no_destinations", target=target or BROADCAST_TARGET)
            return PassSummary(target=target)
        held = self._acquire(self._lock_keys(target, sink))
        if held is None:
            self.logger.warning("pass_dropped", target=target or BROADCAST_TARGET)
            return PassSummary(target=target, dropped=True)
        try:
            with pass_context(target or BROADCAST_TARGET):
                return self._run_pass_locked(target, sink)
        finally:
            for lock in reversed(held):
                lock.release()

    def broadcast_test(self, target: str | None = None) -> DeliveryReport:
        sink = self.sink_factory(target)
        report = sink.broadcast(TEST_BROADCAST_TEXT)
        self.logger.info(
            "test_broadcast_sent",
            target=target or BROADCAST_TARGET,
            delivered=report.delivered,
            failed=list(report.failed),
        )
        return report

    def view_history(self, limit: int = 20) -> list[DedupRecord]:
        return self.store.recent(limit)

    def trim_now(self, max_count: int | None = None) -> int:
        bound = self.config.retention.max_count if max_count is None else max_count
        removed = self.store.trim(bound)
        self.logger.info("store_trimmed", max_count=bound, removed=removed)
        return removed

    def reset_history(self) -> None:
        """Forget every delivered title; the next pass relays the whole page again."""

        self.store.reset()
        self.logger.warning("history_reset", store=str(self.store.db_path))

    # ------------------------------------------------------------------
    # Pass internals
    # ------------------------------------------------------------------
    def _run_pass_locked(self, target: str | None, sink: DeliverySink) -> PassSummary:
        summary = PassSummary(target=target)
        log = self.logger.bind(target=target or BROADCAST_TARGET)
        log.info("pass_started")
        try:
            summary.state = PassState.FETCHING
            items = self.source.fetch_items()
            summary.fetched = len(items)

            summary.state = PassState.FILTERING
            fresh = self._filter_new(items, summary)

            summary.state = PassState.DELIVERING
            for item in fresh:
                self._process_item(item, sink, summary, log)

            summary.state = PassState.TRIMMING
            summary.trimmed = self.store.trim(self.config.retention.max_count)
        except DedupStoreError as exc:
            summary.aborted = True
            summary.error = exc.message
            log.error(
                "pass_aborted",
                stage=summary.state.value,
                error=exc.message,
                details=exc.details,
            )
        finally:
            summary.state = PassState.IDLE

        log.info("pass_finished", **{k: v for k, v in summary.as_dict().items() if k != "target"})
        return summary

    def _filter_new(self, items: list[Item], summary: PassSummary) -> list[Item]:
        fresh: list[Item] = []
        seen: set[str] = set()
        for item in items:
            if not item.is_valid() or item.title in seen:
                continue
            seen.add(item.title)
            if self.store.exists(item.title):
                summary.skipped += 1
                continue
            fresh.append(item)
        return fresh

    def _process_item(
        self,
        item: Item,
        sink: DeliverySink,
        summary: PassSummary,
        log: structlog.BoundLogger,
    ) -> None:
        # another target's pass may have committed it since filtering
        if self.store.exists(item.title):
            summary.skipped += 1
            return
        enriched = self.enricher.enrich(item)
        report = sink.deliver(enriched)
        summary.destination_failures += len(report.failed)
        if report.any_delivered:
            summary.delivered += 1
        else:
            summary.undelivered += 1
            log.warning("item_not_delivered", title=item.title, failed=report.failed)
        # commit once every destination was attempted, whatever the outcome
        if self.store.commit(enriched):
            summary.committed += 1

    @staticmethod
    def _lock_keys(target: str | None, sink: DeliverySink) -> list[str]:
        keys = {f"target:{target or BROADCAST_TARGET}"}
        keys.update(f"destination:{destination.label}" for destination in sink.destinations)
        return sorted(keys)

    def _acquire(self, keys: list[str]) -> list[Lock] | None:
        """Take every lock without blocking; all or nothing."""

        with self._locks_guard:
            locks = [self._locks.setdefault(key, Lock()) for key in keys]
        held: list[Lock] = []
        for lock in locks:
            if not lock.acquire(blocking=False):
                for taken in reversed(held):
                    taken.release()
                return None
            held.append(lock)
        return held


__all__ = ["Orchestrator", "PassState", "PassSummary", "TEST_BROADCAST_TEXT"]
