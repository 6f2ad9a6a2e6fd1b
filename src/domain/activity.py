"""Activity reminder domain models and enums."""

from datetime import time
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ActivityType(StrEnum):
    """Kind of activity a reminder asks for."""

    PILLS = "PILLS"
    WATER = "WATER"
    FOOD = "FOOD"
    EXERCISE = "EXERCISE"


class AlarmState(StrEnum):
    """Alarm lifecycle state of a single task."""

    PENDING = "PENDING"
    ALARMING = "ALARMING"
    COMPLETED = "COMPLETED"


class ActivityTask(BaseModel):
    """Scheduled daily reminder.

    Instances are immutable; the task registry replaces them wholesale on every change.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque task ID, stable for the task's lifetime")
    type: ActivityType = Field(..., description="Activity kind, selects verification prompt and icon")
    label: str = Field(..., description="Human-readable label (e.g., 'Morning medication')")
    scheduled_time: time = Field(..., description="Wall-clock time of day (hour, minute) the task recurs at")
    completed: bool = Field(default=False, description="Whether the activity was verified today")
    photo_evidence: str | None = Field(default=None, description="Data URL of the accepted photo")
    verified_at: str | None = Field(default=None, description="Local HH:MM the photo was accepted")

    @model_validator(mode="after")
    def check_completion_evidence(self) -> Self:
        """A completed task must carry its photo evidence and verification time."""
        if self.completed and (not self.photo_evidence or not self.verified_at):
            msg = f"Completed task {self.id} requires photo_evidence and verified_at"
            raise ValueError(msg)
        return self

    @property
    def time_key(self) -> str:
        """Scheduled time formatted as HH:MM."""
        return self.scheduled_time.strftime("%H:%M")


class VerificationResult(BaseModel):
    """Normalized answer of the photo verification service."""

    verified: bool = Field(default=False, description="Whether the photo shows the expected activity")
    reason: str = Field(..., description="Explanation given by the service")
    confidence: float = Field(default=0.0, description="Service confidence between 0 and 1")


class FamilyContact(BaseModel):
    """Recipient of completion and cancellation messages."""

    name: str = Field(..., description="Display name (e.g., 'Juan (Son)')")
    phone: str = Field(..., description="Phone number in E.164 format")


class CareProfile(BaseModel):
    """Application-wide settings shared by reference between collaborators."""

    user_name: str = Field(..., description="Name of the person receiving reminders")
    contact: FamilyContact


class AlarmSession(BaseModel):
    """The single alarm currently demanding proof of completion.

    Holds the task ID only; the task itself always comes from the registry.
    """

    model_config = ConfigDict(frozen=True)

    task_id: str
    raised_at: str = Field(..., description="Local HH:MM the alarm was raised")


class StatusKind(StrEnum):
    """Presentation category of a status message."""

    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WHATSAPP = "whatsapp"


class StatusIndicator(BaseModel):
    """Last outcome surfaced to the presentation layer."""

    kind: StatusKind
    message: str
