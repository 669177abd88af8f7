"""Periodic check scheduling using APScheduler."""

import logging
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.config import settings
from src.monitor.monitor import Monitor

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


def _job_listener(event: JobExecutionEvent) -> None:
    """Listen for job execution events."""
    if event.exception:
        logger.error(
            "Job %s failed with exception: %s",
            event.job_id,
            event.exception,
        )
    else:
        logger.debug("Job %s executed successfully", event.job_id)


def create_scheduler() -> AsyncIOScheduler:
    """Create and configure the scheduler.

    Jobs live in the default in-memory store; nothing survives a restart.

    Returns:
        Configured AsyncIOScheduler instance.
    """
    job_defaults = {
        "coalesce": True,  # Combine missed ticks into one
        "max_instances": 1,  # Timer ticks never overlap each other
        "misfire_grace_time": 60,
    }

    return AsyncIOScheduler(job_defaults=job_defaults, timezone="UTC")


def start_scheduler(monitor: Monitor) -> AsyncIOScheduler:
    """Start the scheduler with the periodic and initial checks.

    Args:
        monitor: Monitor whose run_check() the jobs call.

    Returns:
        The running scheduler.
    """
    global scheduler

    scheduler = create_scheduler()
    scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    scheduler.add_job(
        monitor.run_check,
        trigger=IntervalTrigger(seconds=settings.ping_interval),
        id="status_check",
        name="Periodic Reachability Check",
        replace_existing=True,
    )
    logger.info("Scheduled check every %d seconds", settings.ping_interval)

    # First observation right away so the startup message goes out
    scheduler.add_job(
        monitor.run_check,
        trigger="date",
        id="initial_check",
        name="Initial Check on Startup",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(
        "Scheduler started with %d jobs",
        len(scheduler.get_jobs()),
    )
    return scheduler


def shutdown_scheduler() -> None:
    """Shutdown the scheduler without waiting for running checks."""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shutdown complete")


def get_scheduler() -> Optional[AsyncIOScheduler]:
    """Get the current scheduler instance.

    Returns:
        The scheduler instance or None if not started.
    """
    return scheduler


def get_jobs_info() -> list:
    """Get information about scheduled jobs.

    Returns:
        List of job information dictionaries.
    """
    if not scheduler:
        return []

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
        })

    return jobs
