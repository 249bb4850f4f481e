from __future__ import annotations

from apscheduler.triggers.interval import IntervalTrigger

from news_relay.config import ScheduleConfig
from news_relay.scheduler import APSchedulerAdapter, job_id_for


class StubScheduler:
    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.jobs: dict[str, object] = {}

    def add_job(self, callback, trigger, id, args, replace_existing, **kwargs):  # noqa: ANN001
        self.calls.append(
            {"id": id, "args": args, "trigger": trigger, "callback": callback, **kwargs}
        )
        self.jobs[id] = trigger

    def get_jobs(self):
        return []

    def start(self):
        self.calls.append({"event": "started"})

    def shutdown(self, wait=False):  # noqa: ARG002
        self.calls.append({"event": "shutdown"})

    def remove_job(self, job_id):  # noqa: ANN001
        self.calls.append({"event": "remove", "id": job_id})
        self.jobs.pop(job_id, None)


def test_job_ids() -> None:
    assert job_id_for("42") == "relay::42"
    assert job_id_for(None) == "relay::broadcast"


def test_build_trigger_uses_interval() -> None:
    trigger = APSchedulerAdapter._build_trigger(ScheduleConfig(interval_seconds=90))
    assert isinstance(trigger, IntervalTrigger)
    assert trigger.interval.total_seconds() == 90


def test_schedule_target_registers_single_instance_job() -> None:
    adapter = APSchedulerAdapter()
    stub = StubScheduler()
    adapter.scheduler = stub  # type: ignore[assignment]

    job_id = adapter.schedule_target("42", ScheduleConfig(interval_seconds=60), lambda target: target)

    (call,) = stub.calls
    assert job_id == "relay::42"
    assert call["args"] == ["42"]
    assert call["max_instances"] == 1
    assert call["coalesce"] is True
    assert "next_run_time" in call
    assert "relay::42" in stub.jobs

    adapter.start()
    adapter.remove_target("42")
    adapter.shutdown()
    assert [c.get("event") for c in stub.calls[1:]] == ["started", "remove", "shutdown"]
    assert "relay::42" not in stub.jobs


def test_schedule_target_without_immediate_run() -> None:
    adapter = APSchedulerAdapter()
    stub = StubScheduler()
    adapter.scheduler = stub  # type: ignore[assignment]
    adapter.schedule_target(None, ScheduleConfig(), lambda target: target, run_now=False)
    assert "next_run_time" not in stub.calls[0]


def test_remove_unknown_target_does_not_raise() -> None:
    adapter = APSchedulerAdapter()
    adapter.remove_target("missing")


def test_real_scheduler_lists_pending_jobs() -> None:
    adapter = APSchedulerAdapter()
    adapter.schedule_target("7", ScheduleConfig(interval_seconds=3600), lambda target: target, run_now=False)
    jobs = adapter.list_jobs()
    assert [job["id"] for job in jobs] == ["relay::7"]
