"""Pydantic models for service layer return types."""

from pydantic import BaseModel


class NotificationResult(BaseModel):
    """Result of sending a message to the family contact."""

    task_id: str
    phone: str
    success: bool
    message_id: str | None = None
    error: str | None = None


class VerificationPayload(BaseModel):
    """Raw structured answer of the verification model.

    Every field is optional so a partially filled answer still parses; the
    verification client fills in conservative defaults.
    """

    verified: bool | None = None
    reason: str | None = None
    confidence: float | None = None


class CancellationResult(BaseModel):
    """Outcome of cancelling an alarm session."""

    task_id: str
    notification: NotificationResult | None = None

    @property
    def notified(self) -> bool:
        """Whether the family contact received the cancellation message."""
        return self.notification is not None and self.notification.success
