"""WhatsApp message sender using WAHA."""

import logging

import httpx
from pydantic import BaseModel, Field

from src.core.config import constants, settings
from src.core.errors import NotificationDeliveryError


logger = logging.getLogger(__name__)


# HTTP status code constants for error handling
HTTP_CLIENT_ERROR_START = 400
HTTP_CLIENT_ERROR_END = 500


class SendMessageResult(BaseModel):
    """Result of sending a WhatsApp message."""

    success: bool = Field(..., description="Whether the message was sent successfully")
    message_id: str | None = Field(None, description="WhatsApp message ID if successful")
    error: str | None = Field(None, description="Error message if failed")


def format_phone_for_waha(phone: str) -> str:
    """Format phone number for WAHA (e.g., '1234567890@c.us')."""
    # Remove 'whatsapp:' prefix if present
    clean_phone = phone.replace("whatsapp:", "").replace("+", "").strip()
    # Add suffix if missing
    if not clean_phone.endswith("@c.us"):
        clean_phone = f"{clean_phone}@c.us"
    return clean_phone


def _extract_message_id(data: dict) -> str | None:
    """Extract message ID from WAHA response.

    WAHA returns { "id": ... } where id can be a string or an object.
    If it's an object (e.g., {"fromMe": True, "remote": "...", "_serialized": "..."}),
    extract the _serialized field or convert to string.
    """
    raw_id = data.get("id")
    if isinstance(raw_id, dict):
        return raw_id.get("_serialized") or str(raw_id)
    return raw_id


async def _post_waha_message(*, chat_id: str, text: str) -> str | None:
    """Post one message to WAHA and return its message ID.

    Raises:
        NotificationDeliveryError: On any HTTP or transport failure
    """
    url = f"{settings.waha_base_url}/api/sendText"
    payload = {"session": "default", "chatId": chat_id, "text": text}
    headers = {"Content-Type": "application/json"}
    if settings.waha_api_key:
        headers["X-Api-Key"] = settings.waha_api_key

    try:
        async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
            response = await client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        raise NotificationDeliveryError(f"Transport error: {e!s}") from e

    if response.is_success:
        return _extract_message_id(response.json())

    if HTTP_CLIENT_ERROR_START <= response.status_code < HTTP_CLIENT_ERROR_END:
        raise NotificationDeliveryError(f"Client error: {response.text}")
    raise NotificationDeliveryError(f"Server error: {response.status_code}")


async def send_text_message(*, to_phone: str, text: str) -> SendMessageResult:
    """Send a text message via WAHA API (single attempt)."""
    chat_id = format_phone_for_waha(to_phone)
    try:
        message_id = await _post_waha_message(chat_id=chat_id, text=text)
    except NotificationDeliveryError as e:
        logger.error("Failed to send WhatsApp message to %s: %s", chat_id, e)
        return SendMessageResult(success=False, error=str(e))

    return SendMessageResult(success=True, message_id=message_id)
