"""Domain models and DTOs."""

from src.domain.activity import (
    ActivityTask,
    ActivityType,
    AlarmSession,
    AlarmState,
    FamilyContact,
    StatusIndicator,
    StatusKind,
    VerificationResult,
)
from src.domain.create_models import ActivityTaskCreate, FamilyContactCreate
from src.domain.update_models import ActivityTaskUpdate


__all__ = [
    "ActivityTask",
    "ActivityTaskCreate",
    "ActivityTaskUpdate",
    "ActivityType",
    "AlarmSession",
    "AlarmState",
    "FamilyContact",
    "FamilyContactCreate",
    "StatusIndicator",
    "StatusKind",
    "VerificationResult",
]
