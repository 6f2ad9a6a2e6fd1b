"""Alarm controller owning the single active alarm session."""

import logging
from datetime import datetime
from typing import Protocol

from src.core.config import constants
from src.core.logging import span
from src.domain.activity import ActivityTask, AlarmSession, AlarmState
from src.models.service_models import CancellationResult
from src.services.notification_service import NotificationRelay
from src.services.task_registry import TaskRegistry


logger = logging.getLogger(__name__)


class AttentionSignal(Protocol):
    """Continuous attention signal (looping alarm sound) played while alarming."""

    def start(self, task: ActivityTask) -> None: ...

    def stop(self) -> None: ...


class LoggingAttentionSignal:
    """Attention signal for headless deployments: records start/stop in the log."""

    def __init__(self) -> None:
        self.playing = False

    def start(self, task: ActivityTask) -> None:
        self.playing = True
        logger.info("Alarm sound started for task %s (%s)", task.id, task.label)

    def stop(self) -> None:
        if self.playing:
            logger.info("Alarm sound stopped")
        self.playing = False


class AlarmController:
    """Enforces that at most one alarm session exists at any time.

    The session references its task by ID; the task itself is always read
    from the registry, so completion recorded there is visible immediately.
    """

    def __init__(
        self,
        *,
        registry: TaskRegistry,
        relay: NotificationRelay,
        signal: AttentionSignal | None = None,
    ) -> None:
        self._registry = registry
        self._relay = relay
        self._signal = signal or LoggingAttentionSignal()
        self._session: AlarmSession | None = None

    @property
    def session(self) -> AlarmSession | None:
        return self._session

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def active_task(self) -> ActivityTask | None:
        """The task currently alarming, read through from the registry."""
        if self._session is None:
            return None
        return self._registry.find_by_id(self._session.task_id)

    def state_of(self, task: ActivityTask) -> AlarmState:
        """Alarm lifecycle state of a task."""
        if task.completed:
            return AlarmState.COMPLETED
        if self._session is not None and self._session.task_id == task.id:
            return AlarmState.ALARMING
        return AlarmState.PENDING

    def raise_alarm(self, task: ActivityTask) -> AlarmSession | None:
        """Start alarming for a task.

        Returns None without side effects when a session is already active or
        the task is already completed.
        """
        with span("alarm_controller.raise_alarm"):
            if self._session is not None:
                logger.warning(
                    "Dropping alarm for task %s: task %s is already alarming",
                    task.id,
                    self._session.task_id,
                )
                return None
            if task.completed:
                logger.warning("Not raising alarm for completed task %s", task.id)
                return None

            self._session = AlarmSession(task_id=task.id, raised_at=datetime.now().strftime(constants.TIME_FORMAT))
            self._signal.start(task)
            logger.info("Alarm raised for task %s (%s)", task.id, task.type)
            return self._session

    def silence(self) -> None:
        """Stop the attention signal without clearing the session."""
        self._signal.stop()

    def dismiss(self, task_id: str | None = None) -> bool:
        """Clear the session.

        With ``task_id`` the session is only cleared if it belongs to that
        task. Returns whether a session was cleared.
        """
        with span("alarm_controller.dismiss"):
            if task_id is not None and (self._session is None or self._session.task_id != task_id):
                logger.warning("Not dismissing alarm: task %s is no longer alarming", task_id)
                return False
            self._signal.stop()
            if self._session is None:
                return False
            logger.info("Alarm dismissed for task %s", self._session.task_id)
            self._session = None
            return True

    async def cancel(self) -> CancellationResult | None:
        """Cancel the active alarm, telling the family contact before clearing it.

        The task stays incomplete. Returns None if no alarm was active. When the
        alarming task no longer exists the session is still cleared, but no
        message is sent.
        """
        with span("alarm_controller.cancel"):
            if self._session is None:
                logger.warning("Cancel requested with no active alarm")
                return None

            session = self._session
            task = self.active_task
            self._signal.stop()
            notification = None
            if task is not None:
                message = self._relay.compose_cancellation_message(task=task, cancelled_at=datetime.now())
                notification = await self._relay.notify(task=task, message=message)
            else:
                logger.warning("Alarming task %s no longer exists; cancelling without notice", session.task_id)
            logger.info("Alarm cancelled for task %s", session.task_id)
            if self._session is session:
                self._session = None
            return CancellationResult(task_id=session.task_id, notification=notification)
