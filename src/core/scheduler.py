"""Scheduler that polls the wall clock for due reminders."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from src.core.config import settings
from src.services.workflow_service import AlarmWorkflow


logger = logging.getLogger(__name__)

CLOCK_JOB_ID = "alarm_clock"

# Global scheduler instance
scheduler = AsyncIOScheduler()


async def check_due_tasks(workflow: AlarmWorkflow) -> None:
    """Run one clock check.

    Runs every `clock_poll_seconds` on the event loop, alongside in-flight
    verification and notification calls. Errors are logged so the job keeps running.
    """
    try:
        workflow.tick()
    except Exception:
        logger.exception("Error in alarm clock job")


def start_scheduler(workflow: AlarmWorkflow) -> None:
    """Register the clock job and start the scheduler.

    This should be called during FastAPI app startup.
    """
    logger.info("Starting scheduler")

    scheduler.add_job(
        check_due_tasks,
        trigger=IntervalTrigger(seconds=settings.clock_poll_seconds),
        args=[workflow],
        id=CLOCK_JOB_ID,
        name="Check Due Reminders",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Scheduled alarm clock job: every {settings.clock_poll_seconds}s")

    scheduler.start()
    logger.info("Scheduler started successfully")


def stop_scheduler() -> None:
    """Stop the scheduler.

    This should be called during FastAPI app shutdown.
    """
    logger.info("Stopping scheduler")
    scheduler.shutdown(wait=True)
    logger.info("Scheduler stopped")
