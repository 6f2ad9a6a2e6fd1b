"""Unit tests for notification_service module."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from src.core.config import Settings
from src.interface.whatsapp_sender import SendMessageResult
from src.services.notification_service import CANCELLATION_REASON, NotificationRelay


@pytest.fixture
def waha_relay(profile) -> NotificationRelay:
    return NotificationRelay(profile=profile, config=Settings(notification_channel="waha"))


@pytest.fixture
def mock_whatsapp_sender(monkeypatch):
    """Mock the whatsapp_sender.send_text_message function."""
    mock_send = AsyncMock(return_value=SendMessageResult(success=True, message_id="msg_456"))
    monkeypatch.setattr("src.services.notification_service.whatsapp_sender.send_text_message", mock_send)
    return mock_send


@pytest.mark.unit
class TestComposeMessages:
    """Test mandatory message content."""

    def test_completion_message_fields(self, relay, water_task):
        message = relay.compose_completion_message(
            task=water_task,
            completed_at=datetime(2024, 1, 1, 10, 31),
            reason="Person drinking water",
        )

        assert "Antonio" in message
        assert "Drink water" in message
        assert "10:31" in message
        assert "Person drinking water" in message

    def test_cancellation_message_fields(self, relay, water_task):
        message = relay.compose_cancellation_message(task=water_task, cancelled_at=datetime(2024, 1, 1, 9, 5))

        assert "Antonio" in message
        assert "Drink water" in message
        assert "09:05" in message
        assert CANCELLATION_REASON in message

    def test_messages_follow_profile_changes(self, relay, profile, water_task):
        profile.user_name = "Carmen"

        message = relay.compose_completion_message(task=water_task, completed_at=datetime.now(), reason="ok")

        assert "Carmen" in message


@pytest.mark.unit
class TestNotify:
    """Test delivery through both channels."""

    @pytest.mark.asyncio
    async def test_log_channel_always_succeeds(self, relay, water_task, mock_whatsapp_sender):
        result = await relay.notify(task=water_task, message="hello")

        assert result.success is True
        assert result.phone == "+34600000000"
        assert result.task_id == water_task.id
        mock_whatsapp_sender.assert_not_called()

    @pytest.mark.asyncio
    async def test_log_channel_simulates_latency(self, profile, water_task, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("src.services.notification_service.asyncio.sleep", sleep)
        relay = NotificationRelay(
            profile=profile, config=Settings(notification_channel="log", simulated_send_delay_seconds=1.5)
        )

        await relay.notify(task=water_task, message="hello")

        sleep.assert_awaited_once_with(1.5)

    @pytest.mark.asyncio
    async def test_waha_channel_sends_to_contact(self, waha_relay, water_task, mock_whatsapp_sender):
        result = await waha_relay.notify(task=water_task, message="Task done")

        assert result.success is True
        assert result.message_id == "msg_456"
        mock_whatsapp_sender.assert_awaited_once_with(to_phone="+34600000000", text="Task done")

    @pytest.mark.asyncio
    async def test_waha_failure_is_reported(self, waha_relay, water_task, mock_whatsapp_sender):
        mock_whatsapp_sender.return_value = SendMessageResult(success=False, error="Server error: 503")

        result = await waha_relay.notify(task=water_task, message="Task done")

        assert result.success is False
        assert result.error == "Server error: 503"

    @pytest.mark.asyncio
    async def test_unexpected_error_does_not_raise(self, waha_relay, water_task, mock_whatsapp_sender):
        mock_whatsapp_sender.side_effect = RuntimeError("boom")

        result = await waha_relay.notify(task=water_task, message="Task done")

        assert result.success is False
        assert "boom" in result.error

    @pytest.mark.asyncio
    async def test_uses_current_contact(self, waha_relay, profile, water_task, mock_whatsapp_sender):
        profile.contact.phone = "+34611111111"

        await waha_relay.notify(task=water_task, message="hi")

        assert mock_whatsapp_sender.call_args.kwargs["to_phone"] == "+34611111111"
