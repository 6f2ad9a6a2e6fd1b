"""Pydantic models for creating activity tasks."""

import re
from datetime import time

from pydantic import BaseModel, Field, field_validator

from src.domain.activity import ActivityType


class ActivityTaskCreate(BaseModel):
    """Payload for creating a new reminder."""

    type: ActivityType = Field(default=ActivityType.WATER, description="Activity kind")
    label: str = Field(default="New alarm", min_length=1, description="Human-readable label")
    scheduled_time: time = Field(default=time(12, 0), description="Time of day the reminder fires")

    @field_validator("scheduled_time")
    @classmethod
    def truncate_to_minute(cls, v: time) -> time:
        """Reminders are matched at minute resolution."""
        return v.replace(second=0, microsecond=0)


class FamilyContactCreate(BaseModel):
    """Payload for replacing the family contact."""

    name: str = Field(..., min_length=1, description="Display name of the contact")
    phone: str = Field(..., description="Phone number in E.164 format")

    @field_validator("phone")
    @classmethod
    def validate_phone_e164(cls, v: str) -> str:
        """Validate phone number is in E.164 format."""
        if not re.match(r"^\+[1-9]\d{1,14}$", v):
            msg = "Phone number must be in E.164 format (e.g., +14155552671)"
            raise ValueError(msg)
        return v
