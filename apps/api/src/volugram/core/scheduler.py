"""
Periodic Jobs

Thin wrapper around APScheduler's AsyncIOScheduler. Modules register their
jobs (currently only the expired token sweep) and the lifespan starts and
stops the scheduler around the application's lifetime.

A job registered before start is added when the scheduler starts; a job
registered afterwards is added immediately. Job failures are logged by the
event listener and never stop the scheduler.
"""

import logging
from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Coroutine[Any, Any, Any]]

JOB_DEFAULTS = {
    # A sweep that missed several runs only needs to run once
    "coalesce": True,
    "max_instances": 1,
    "misfire_grace_time": 300,
}

_scheduler: AsyncIOScheduler | None = None
_jobs: dict[str, tuple[JobFunc, BaseTrigger]] = {}


def _on_job_event(event: JobExecutionEvent) -> None:
    if event.exception:
        logger.error(f"Job {event.job_id} raised: {event.exception}", exc_info=event.exception)
        return
    logger.debug(f"Job {event.job_id} finished")


def _add(scheduler: AsyncIOScheduler, job_id: str, func: JobFunc, trigger: BaseTrigger) -> None:
    scheduler.add_job(func, trigger=trigger, id=job_id, replace_existing=True)
    logger.info(f"Scheduled job {job_id} ({trigger})")


async def start_scheduler() -> AsyncIOScheduler:
    """
    Create and start the scheduler with every registered job.

    Calling it again while running returns the running instance.
    """
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        return _scheduler

    scheduler = AsyncIOScheduler(timezone="UTC", job_defaults=JOB_DEFAULTS)
    scheduler.add_listener(_on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    for job_id, (func, trigger) in _jobs.items():
        _add(scheduler, job_id, func, trigger)

    scheduler.start()
    _scheduler = scheduler
    logger.info(f"Scheduler started, {len(_jobs)} job(s)")
    return scheduler


async def stop_scheduler() -> None:
    """Shut the scheduler down, letting running jobs finish."""
    global _scheduler

    if _scheduler is None or not _scheduler.running:
        return

    _scheduler.shutdown(wait=True)
    _scheduler = None
    logger.info("Scheduler stopped")


def register_job(job_id: str, func: JobFunc, trigger: BaseTrigger) -> None:
    """
    Register a periodic job.

    Args:
        job_id: Unique job name, re-registering replaces the job
        func: Coroutine function taking no arguments
        trigger: When to run, e.g. IntervalTrigger(minutes=15)
    """
    _jobs[job_id] = (func, trigger)
    if _scheduler is not None:
        _add(_scheduler, job_id, func, trigger)


def clear_jobs() -> None:
    """Forget every registered job (used on shutdown and by tests)."""
    _jobs.clear()


async def trigger_job_manually(job_id: str) -> dict[str, Any]:
    """
    Run a registered job now, outside its schedule.

    Returns:
        {"job_id", "status": "success" | "error", "executed_at"} plus
        "error" when the job raised

    Raises:
        ValueError: If no job has this id
    """
    if job_id not in _jobs:
        raise ValueError(f"Unknown job {job_id!r}, registered: {sorted(_jobs)}")

    func, _ = _jobs[job_id]
    result: dict[str, Any] = {
        "job_id": job_id,
        "status": "success",
        "executed_at": datetime.now(UTC).isoformat(),
    }

    try:
        await func()
    except Exception as e:
        logger.error(f"Manual run of job {job_id} failed: {e}", exc_info=True)
        result["status"] = "error"
        result["error"] = str(e)

    return result
