"""Update models for activity tasks."""

from datetime import time

from pydantic import BaseModel, Field, field_validator

from src.domain.activity import ActivityType


class ActivityTaskUpdate(BaseModel):
    """Partial update of the editable task fields.

    Only fields explicitly set are applied; completion state is never editable here.
    """

    type: ActivityType | None = None
    label: str | None = Field(default=None, min_length=1)
    scheduled_time: time | None = None

    @field_validator("scheduled_time")
    @classmethod
    def truncate_to_minute(cls, v: time | None) -> time | None:
        """Reminders are matched at minute resolution."""
        return v.replace(second=0, microsecond=0) if v else v
