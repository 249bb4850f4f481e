"""Scheduling helpers."""

from .apsched_adapter import BROADCAST_TARGET, APSchedulerAdapter, job_id_for

__all__ = ["APSchedulerAdapter", "BROADCAST_TARGET", "job_id_for"]
