"""APScheduler wrapper exposing higher level helpers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..config import ScheduleConfig
from ..logging_conf import get_logger

BROADCAST_TARGET = "broadcast"


def job_id_for(target: str | None) -> str:
    return f"relay::{target or BROADCAST_TARGET}"


class APSchedulerAdapter:
    """Manage recurring relay jobs, one per delivery target."""

    def __init__(self) -> None:
        # one worker thread per job is enough; overlapping runs are skipped
        self.scheduler = BackgroundScheduler(
            job_defaults={"max_instances": 1, "coalesce": True, "misfire_grace_time": 30}
        )
        self.logger = get_logger("scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_target(
        self,
        target: str | None,
        schedule: ScheduleConfig,
        callback: Callable[[str | None], object],
        run_now: bool = True,
    ) -> str:
        job_id = job_id_for(target)
        kwargs = {}
        if run_now:
            kwargs["next_run_time"] = datetime.now(timezone.utc)
        self.scheduler.add_job(
            callback,
            trigger=self._build_trigger(schedule),
            id=job_id,
            args=[target],
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **kwargs,
        )
        self.logger.info(
            "job_scheduled",
            target=target or BROADCAST_TARGET,
            interval_seconds=schedule.interval_seconds,
            run_now=run_now,
        )
        return job_id

    def remove_target(self, target: str | None) -> None:
        job_id = job_id_for(target)
        try:
            self.scheduler.remove_job(job_id)
        except Exception:  # noqa: BLE001
            self.logger.warning("job_remove_failed", target=target or BROADCAST_TARGET)

    @staticmethod
    def _build_trigger(schedule: ScheduleConfig) -> IntervalTrigger:
        return IntervalTrigger(seconds=float(schedule.interval_seconds))

    def list_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "next_run_time": getattr(job, "next_run_time", None),
                    "trigger": str(job.trigger),
                }
            )
        return jobs


__all__ = ["APSchedulerAdapter", "BROADCAST_TARGET", "job_id_for"]
