"""Wall-clock check that detects when a reminder's minute has arrived."""

import logging
from collections.abc import Iterable
from datetime import datetime

from src.core.config import constants
from src.domain.activity import ActivityTask


logger = logging.getLogger(__name__)


def format_minute(moment: datetime) -> str:
    """Format a moment at the resolution reminders are matched (HH:MM)."""
    return moment.strftime(constants.TIME_FORMAT)


class MinuteClock:
    """Detects due tasks at most once per wall-clock minute.

    The clock is polled far more often than once a minute. The first poll of a
    new minute evaluates the tasks; every later poll in the same minute is a
    no-op. The minute is consumed even when an alarm is already active, so a
    task due during another alarm is skipped until its next occurrence.
    """

    def __init__(self) -> None:
        self.last_checked_minute: str = ""

    def poll(
        self,
        *,
        now: datetime,
        tasks: Iterable[ActivityTask],
        alarm_active: bool,
    ) -> ActivityTask | None:
        """Return the task that should start alarming now, if any.

        Args:
            now: Current local wall-clock time
            tasks: Tasks in registry order; the first match wins
            alarm_active: Whether an alarm session already exists

        Returns:
            The first incomplete task scheduled for this minute, or None
        """
        current_minute = format_minute(now)
        if current_minute == self.last_checked_minute:
            return None
        self.last_checked_minute = current_minute

        due = next((t for t in tasks if t.time_key == current_minute and not t.completed), None)
        if due is None:
            return None

        if alarm_active:
            logger.warning("Task %s due at %s skipped: another alarm is active", due.id, current_minute)
            return None

        logger.info("Task %s is due at %s", due.id, current_minute)
        return due
