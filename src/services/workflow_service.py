"""Alarm workflow orchestrator.

Sequences the reminder lifecycle: clock tick -> alarm -> photo -> verification
-> completion -> family notification. This is the only component that mutates
the task registry's completion state or the alarm session.
"""

import base64
import logging
from dataclasses import dataclass, field
from datetime import datetime, time

from src.core.config import constants
from src.core.logging import span
from src.domain.activity import (
    ActivityTask,
    ActivityType,
    AlarmSession,
    CareProfile,
    FamilyContact,
    StatusIndicator,
    StatusKind,
)
from src.domain.create_models import ActivityTaskCreate, FamilyContactCreate
from src.domain.update_models import ActivityTaskUpdate
from src.models.service_models import CancellationResult, NotificationResult
from src.services.alarm_controller import AlarmController, AttentionSignal
from src.services.clock_service import MinuteClock
from src.services.notification_service import NotificationRelay
from src.services.task_registry import TaskRegistry
from src.services.verification_service import VerificationClient


logger = logging.getLogger(__name__)

PROCESSING_ERROR_MESSAGE = "Error processing the image"


@dataclass
class AppState:
    """Application state owned by the orchestrator and shared by reference."""

    profile: CareProfile
    registry: TaskRegistry
    alarm: AlarmController
    is_verifying: bool = False
    is_notifying: bool = False
    status: StatusIndicator | None = None


@dataclass
class StateSnapshot:
    """Read-only view of the state consumed by the presentation layer."""

    user_name: str
    contact: FamilyContact
    tasks: list[ActivityTask]
    alarm: AlarmSession | None
    alarm_task: ActivityTask | None
    is_verifying: bool
    is_notifying: bool
    status: StatusIndicator | None
    completed_count: int
    total_count: int
    states: dict[str, str] = field(default_factory=dict)


def to_data_url(photo: bytes, mime_type: str) -> str:
    """Encode a photo as a data URL for storage as completion evidence."""
    return f"data:{mime_type};base64,{base64.b64encode(photo).decode('ascii')}"


class AlarmWorkflow:
    """Drives the alarm lifecycle and holds the transient progress flags."""

    def __init__(
        self,
        *,
        profile: CareProfile,
        registry: TaskRegistry,
        verifier: VerificationClient | None = None,
        relay: NotificationRelay | None = None,
        signal: AttentionSignal | None = None,
        clock: MinuteClock | None = None,
    ) -> None:
        self.relay = relay or NotificationRelay(profile=profile)
        self.verifier = verifier or VerificationClient()
        self.clock = clock or MinuteClock()
        self.state = AppState(
            profile=profile,
            registry=registry,
            alarm=AlarmController(registry=registry, relay=self.relay, signal=signal),
        )

    @property
    def registry(self) -> TaskRegistry:
        return self.state.registry

    @property
    def alarm(self) -> AlarmController:
        return self.state.alarm

    def _set_status(self, kind: StatusKind, message: str) -> StatusIndicator:
        self.state.status = StatusIndicator(kind=kind, message=message)
        return self.state.status

    def clear_status(self) -> None:
        self.state.status = None

    # Scheduling

    def tick(self, now: datetime | None = None) -> AlarmSession | None:
        """Check the clock once and raise an alarm if a task just became due."""
        due = self.clock.poll(
            now=now or datetime.now(),
            tasks=self.registry.list_tasks(),
            alarm_active=self.alarm.is_active,
        )
        if due is None:
            return None
        return self.alarm.raise_alarm(due)

    def trigger_alarm_manually(self, task_id: str) -> AlarmSession | None:
        """Raise the alarm for a specific task right now."""
        task = self.registry.find_by_id(task_id)
        if task is None:
            logger.warning("Ignoring manual alarm for unknown task %s", task_id)
            return None
        return self.alarm.raise_alarm(task)

    def trigger_test_alarm(self) -> AlarmSession | None:
        """Raise a test alarm for the first incomplete task."""
        task = next(iter(self.registry.pending()), None)
        if task is None:
            logger.warning("No incomplete task to raise a test alarm for")
            return None
        return self.alarm.raise_alarm(task)

    # Photo verification

    @property
    def is_busy(self) -> bool:
        return self.state.is_verifying or self.state.is_notifying

    async def submit_photo(
        self,
        photo: bytes,
        mime_type: str = constants.DEFAULT_IMAGE_MIME_TYPE,
    ) -> StatusIndicator | None:
        """Verify photo evidence for the alarming task.

        Returns the status surfaced to the user, or None when the submission
        was ignored (no active alarm, a submission or cancellation already in
        progress, or the alarm changed while the photo was being checked).
        """
        with span("workflow_service.submit_photo"):
            session = self.alarm.session
            task = self.alarm.active_task
            if session is None or task is None:
                logger.warning("Photo submitted with no active alarm")
                return None
            if self.is_busy:
                logger.warning("Photo for task %s ignored: submission already in progress", task.id)
                return None

            self.state.is_verifying = True
            try:
                result = await self.verifier.verify(photo, task.type, mime_type=mime_type)

                if not result.verified:
                    self.state.is_verifying = False
                    logger.info("Photo for task %s rejected: %s", task.id, result.reason)
                    return self._set_status(StatusKind.ERROR, f"Could not verify: {result.reason}")

                # Edits made during verification are kept; deletion or a new session abandons the photo
                task = self.registry.find_by_id(session.task_id)
                if self.alarm.session is not session or task is None:
                    self.state.is_verifying = False
                    logger.warning("Alarm for task %s changed during verification; photo discarded", session.task_id)
                    return None

                completed_at = datetime.now()
                self.registry.mark_completed(
                    task.id,
                    photo_evidence=to_data_url(photo, mime_type),
                    verified_at=completed_at.strftime(constants.TIME_FORMAT),
                )
                self.alarm.silence()

                self.state.is_verifying = False
                self.state.is_notifying = True
                message = self.relay.compose_completion_message(
                    task=task, completed_at=completed_at, reason=result.reason
                )
                delivery = await self.relay.notify(task=task, message=message)
                self.state.is_notifying = False

                self.alarm.dismiss(task.id)
                return self._completion_status(delivery)
            except Exception:
                logger.exception("Error processing photo for task %s", task.id)
                self.state.is_verifying = False
                self.state.is_notifying = False
                return self._set_status(StatusKind.ERROR, PROCESSING_ERROR_MESSAGE)

    def _completion_status(self, delivery: NotificationResult) -> StatusIndicator:
        contact = self.state.profile.contact
        if delivery.success:
            return self._set_status(StatusKind.WHATSAPP, f"Verified and WhatsApp sent to {contact.name}!")
        return self._set_status(
            StatusKind.ERROR,
            f"Verified, but the message to {contact.name} could not be delivered",
        )

    async def cancel_alarm(self) -> CancellationResult | None:
        """Cancel the active alarm; the family contact is told.

        Ignored (returns None) when no alarm is active or while a photo is
        being verified or a message is being sent.
        """
        if self.is_busy:
            logger.warning("Cancel ignored: verification or notification in progress")
            return None
        if not self.alarm.is_active:
            return await self.alarm.cancel()

        self.state.is_notifying = True
        try:
            result = await self.alarm.cancel()
        finally:
            self.state.is_notifying = False

        contact_name = self.state.profile.contact.name
        if result.notification is None:
            self._set_status(StatusKind.INFO, "Alarm cancelled.")
        elif result.notified:
            self._set_status(StatusKind.INFO, f"Alarm cancelled. {contact_name} was notified.")
        else:
            self._set_status(StatusKind.INFO, f"Alarm cancelled. {contact_name} could not be notified.")
        return result

    # Task and profile editing (never touches alarm state)

    def add_task(self, payload: ActivityTaskCreate | None = None) -> ActivityTask:
        return self.registry.add(payload or ActivityTaskCreate())

    def update_task(self, task_id: str, changes: ActivityTaskUpdate) -> ActivityTask | None:
        return self.registry.update(task_id, changes)

    def rename_task(self, task_id: str, label: str) -> ActivityTask | None:
        return self.registry.rename(task_id, label)

    def reschedule_task(self, task_id: str, scheduled_time: time) -> ActivityTask | None:
        return self.registry.reschedule(task_id, scheduled_time)

    def change_task_type(self, task_id: str, activity_type: ActivityType) -> ActivityTask | None:
        return self.registry.change_type(task_id, activity_type)

    def delete_task(self, task_id: str) -> ActivityTask | None:
        return self.registry.remove(task_id)

    def update_contact(self, payload: FamilyContactCreate) -> FamilyContact:
        self.state.profile.contact = FamilyContact(name=payload.name, phone=payload.phone)
        logger.info("Family contact updated to %s", payload.name)
        return self.state.profile.contact

    def rename_user(self, user_name: str) -> None:
        self.state.profile.user_name = user_name

    def snapshot(self) -> StateSnapshot:
        """Current state for display."""
        tasks = self.registry.list_tasks()
        completed_count, total_count = self.registry.progress()
        return StateSnapshot(
            user_name=self.state.profile.user_name,
            contact=self.state.profile.contact,
            tasks=tasks,
            alarm=self.alarm.session,
            alarm_task=self.alarm.active_task,
            is_verifying=self.state.is_verifying,
            is_notifying=self.state.is_notifying,
            status=self.state.status,
            completed_count=completed_count,
            total_count=total_count,
            states={t.id: self.alarm.state_of(t).value for t in tasks},
        )
