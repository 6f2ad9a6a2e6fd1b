"""Error types and classification for the external verification and notification services."""

from enum import Enum
from typing import Literal


class VerificationServiceError(Exception):
    """The photo verification service returned nothing usable."""


class NotificationDeliveryError(Exception):
    """A confirmation message could not be delivered to the family contact."""


class ErrorCategory(Enum):
    """Categories of errors raised while talking to external services."""

    SERVICE_QUOTA_EXCEEDED = "service_quota_exceeded"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    AUTHENTICATION_FAILED = "authentication_failed"
    NETWORK_ERROR = "network_error"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


_ERROR_PATTERNS: dict[
    Literal["quota", "rate_limit", "auth", "network", "malformed"],
    dict[str, list[str] | set[str]],
] = {
    "quota": {
        "phrases": [
            "quota exceeded",
            "insufficient credits",
            "credit limit",
            "credits exhausted",
            "out of credits",
        ],
        "exception_types": set(),
    },
    "rate_limit": {
        "phrases": [
            "rate limit",
            "too many requests",
            "rate_limit_exceeded",
            "throttled",
        ],
        "exception_types": set(),
    },
    "auth": {
        "phrases": [
            "authentication failed",
            "invalid api key",
            "unauthorized",
            "invalid token",
            "api key",
            "credential not configured",
            "401",
        ],
        "exception_types": {"AuthenticationError", "PermissionError"},
    },
    "network": {
        "phrases": [
            "connection",
            "timeout",
            "network",
            "503",
            "502",
            "504",
            "unreachable",
        ],
        "exception_types": {"ConnectionError", "TimeoutError", "ConnectError", "ReadTimeout"},
    },
    "malformed": {
        "phrases": [
            "json",
            "validation error",
            "unexpected model behavior",
        ],
        "exception_types": {
            "VerificationServiceError",
            "ValidationError",
            "JSONDecodeError",
            "UnexpectedModelBehavior",
        },
    },
}


def _match_error_pattern(
    *,
    error_str: str,
    exception_type: str,
    pattern_type: Literal["quota", "rate_limit", "auth", "network", "malformed"],
) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def classify_service_error(exception: Exception) -> tuple[ErrorCategory, str]:
    """Classify an external service error and return a diagnostic message.

    The message is safe to show to the person holding the phone, so it never
    includes the raw exception text.

    Args:
        exception: The exception raised while calling the service

    Returns:
        Tuple of (ErrorCategory, diagnostic_message)
    """
    error_str = str(exception).lower()
    exception_type = type(exception).__name__

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="quota"):
        return (
            ErrorCategory.SERVICE_QUOTA_EXCEEDED,
            "The AI service quota has been exceeded. Please try again later.",
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="rate_limit"):
        return (
            ErrorCategory.RATE_LIMIT_EXCEEDED,
            "The AI service is busy. Please wait a moment and try again.",
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="auth"):
        return (
            ErrorCategory.AUTHENTICATION_FAILED,
            "The AI service is not configured correctly. Please contact your family.",
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="network"):
        return (
            ErrorCategory.NETWORK_ERROR,
            "Error contacting AI service. Please check your connection and try again.",
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="malformed"):
        return (
            ErrorCategory.MALFORMED_RESPONSE,
            "The AI service returned an unreadable answer. Please take the photo again.",
        )

    return (
        ErrorCategory.UNKNOWN,
        "Error contacting AI service.",
    )
