"""Pytest configuration and shared fixtures."""

from datetime import time
from unittest.mock import AsyncMock

import pytest

from src.core.config import Settings
from src.domain.activity import (
    ActivityTask,
    ActivityType,
    CareProfile,
    FamilyContact,
    VerificationResult,
)
from src.services.notification_service import NotificationRelay
from src.services.task_registry import TaskRegistry
from src.services.workflow_service import AlarmWorkflow


class RecordingSignal:
    """Attention signal double that records start/stop calls."""

    def __init__(self) -> None:
        self.playing = False
        self.started: list[str] = []
        self.stop_count = 0

    def start(self, task: ActivityTask) -> None:
        self.playing = True
        self.started.append(task.id)

    def stop(self) -> None:
        self.playing = False
        self.stop_count += 1


@pytest.fixture
def app_settings() -> Settings:
    """Settings with the simulated notification channel and no send delay."""
    return Settings(notification_channel="log", simulated_send_delay_seconds=0, openrouter_api_key=None)


@pytest.fixture
def profile() -> CareProfile:
    return CareProfile(user_name="Antonio", contact=FamilyContact(name="Juan (Son)", phone="+34600000000"))


@pytest.fixture
def water_task() -> ActivityTask:
    return ActivityTask(id="water", type=ActivityType.WATER, label="Drink water", scheduled_time=time(10, 30))


@pytest.fixture
def pills_task() -> ActivityTask:
    return ActivityTask(id="pills", type=ActivityType.PILLS, label="Morning medication", scheduled_time=time(8, 0))


@pytest.fixture
def registry(pills_task, water_task) -> TaskRegistry:
    return TaskRegistry([pills_task, water_task])


@pytest.fixture
def signal() -> RecordingSignal:
    return RecordingSignal()


@pytest.fixture
def relay(profile, app_settings) -> NotificationRelay:
    return NotificationRelay(profile=profile, config=app_settings)


@pytest.fixture
def mock_verifier() -> AsyncMock:
    """Verification client double; accepts every photo unless reconfigured."""
    verifier = AsyncMock()
    verifier.verify.return_value = VerificationResult(verified=True, reason="Person drinking water", confidence=0.92)
    return verifier


@pytest.fixture
def workflow(profile, registry, mock_verifier, relay, signal) -> AlarmWorkflow:
    return AlarmWorkflow(profile=profile, registry=registry, verifier=mock_verifier, relay=relay, signal=signal)
