"""Configuration management for eldercare-guard."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenRouter Configuration
    openrouter_api_key: str | None = Field(default=None, description="OpenRouter API key for photo verification")
    model_id: str = Field(
        default="google/gemini-2.5-flash",
        description="Vision-capable model ID on OpenRouter used to check photo evidence",
    )

    # WAHA Configuration
    waha_base_url: str = Field(default="http://waha:3000", description="WAHA Base URL")
    waha_api_key: str | None = Field(default=None, description="WAHA API Key (optional)")

    # Notification channel: "waha" sends real WhatsApp messages, "log" simulates the send
    notification_channel: Literal["waha", "log"] = Field(
        default="log", description="Transport used to reach the family contact"
    )
    simulated_send_delay_seconds: float = Field(
        default=1.5, description="Latency of the simulated notification channel"
    )

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Care subject and family contact
    user_name: str = Field(default="Antonio", description="Name of the person receiving reminders")
    family_contact_name: str = Field(default="Juan (Son)", description="Family member receiving confirmations")
    family_contact_phone: str = Field(default="+34600000000", description="Family member phone in E.164 format")

    # Scheduling
    seed_default_tasks: bool = Field(default=True, description="Start with the default daily reminders")
    clock_poll_seconds: int = Field(default=1, description="How often the wall clock is checked")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_BAD_REQUEST: int = 400
    HTTP_SERVER_ERROR: int = 500

    # Wall clock resolution used for matching scheduled times
    TIME_FORMAT: str = "%H:%M"

    # Photo evidence
    DEFAULT_IMAGE_MIME_TYPE: str = "image/jpeg"


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
