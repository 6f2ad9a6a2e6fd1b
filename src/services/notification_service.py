"""Notification relay for telling the family contact about completed or cancelled reminders."""

import asyncio
import logging
from datetime import datetime

from src.core.config import Settings, constants, settings
from src.core.logging import span
from src.domain.activity import ActivityTask, CareProfile
from src.interface import whatsapp_sender
from src.models.service_models import NotificationResult


logger = logging.getLogger(__name__)

CANCELLATION_REASON = "⚠️ The user cancelled the alarm manually."


class NotificationRelay:
    """Delivers confirmation messages to the family contact.

    With the "log" channel the send is simulated: the message is logged and a
    fixed delay mimics the network round trip.
    """

    def __init__(self, *, profile: CareProfile, config: Settings | None = None) -> None:
        self._profile = profile
        self._config = config or settings

    def compose_completion_message(self, *, task: ActivityTask, completed_at: datetime, reason: str) -> str:
        """Build the message confirming a verified activity."""
        return (
            f"✅ ElderCare Guard: {self._profile.user_name} completed "
            f'"{task.label}" at {completed_at.strftime(constants.TIME_FORMAT)}. '
            f'Photo confirmation validated by AI: "{reason}".'
        )

    def compose_cancellation_message(self, *, task: ActivityTask, cancelled_at: datetime) -> str:
        """Build the message warning that an alarm was cancelled without proof."""
        return (
            f"ElderCare Guard: {self._profile.user_name} stopped the alarm "
            f'"{task.label}" at {cancelled_at.strftime(constants.TIME_FORMAT)}. '
            f"{CANCELLATION_REASON}"
        )

    async def notify(self, *, task: ActivityTask, message: str) -> NotificationResult:
        """Send a message about `task` to the family contact.

        Never raises; delivery problems are reported in the result.
        """
        with span("notification_service.notify"):
            phone = self._profile.contact.phone
            logger.info("Sending notification for task %s to %s", task.id, phone)

            if self._config.notification_channel == "log":
                logger.info("[WHATSAPP] To: %s Message: %s", phone, message)
                await asyncio.sleep(self._config.simulated_send_delay_seconds)
                return NotificationResult(task_id=task.id, phone=phone, success=True)

            try:
                send_result = await whatsapp_sender.send_text_message(to_phone=phone, text=message)
            except Exception as e:
                logger.exception("Error sending notification for task %s", task.id)
                return NotificationResult(task_id=task.id, phone=phone, success=False, error=str(e))

            if send_result.success:
                logger.info("Notification for task %s delivered to %s", task.id, phone)
            else:
                logger.error(
                    "Failed to notify %s about task %s: %s",
                    phone,
                    task.id,
                    send_result.error,
                )
            return NotificationResult(
                task_id=task.id,
                phone=phone,
                success=send_result.success,
                message_id=send_result.message_id,
                error=send_result.error,
            )
