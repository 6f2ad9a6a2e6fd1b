"""Photo verification through a vision model on OpenRouter."""

import logging

from pydantic_ai import Agent, BinaryContent
from pydantic_ai.models.openrouter import OpenRouterModel
from pydantic_ai.providers.openrouter import OpenRouterProvider

from src.core.config import constants, settings
from src.core.errors import VerificationServiceError, classify_service_error
from src.core.logging import log_with_context, span
from src.domain.activity import ActivityType, VerificationResult
from src.models.service_models import VerificationPayload


logger = logging.getLogger(__name__)

FALLBACK_REASON = "No description provided."

ACTIVITY_PROMPTS: dict[ActivityType, str] = {
    ActivityType.PILLS: (
        "Analyze if this image shows a person taking medication or holding a pill/medicine bottle "
        "ready to be consumed."
    ),
    ActivityType.WATER: (
        "Analyze if this image shows a person drinking water from a glass, bottle, or holding a water container."
    ),
    ActivityType.FOOD: "Analyze if this image shows a person eating a meal or a plate of food prepared to be eaten.",
    ActivityType.EXERCISE: (
        "Analyze if this image shows a person performing light exercises, walking, or wearing sports gear."
    ),
}

STRICTNESS_DIRECTIVE = (
    "Check carefully. Verification must be strict to ensure the safety of an elderly person: "
    "when in doubt, answer verified=false. Always fill in verified, a short reason, "
    "and a confidence between 0 and 1."
)


def build_prompt(activity: ActivityType) -> str:
    """Instruction text sent alongside the photo."""
    return f"{ACTIVITY_PROMPTS[activity]}\n{STRICTNESS_DIRECTIVE}"


class _AgentState:
    """Singleton state for the verification agent."""

    instance: Agent[None, VerificationPayload] | None = None


def _create_agent() -> Agent[None, VerificationPayload]:
    """Create the verification agent (called once, on first use)."""
    api_key = settings.require_credential("openrouter_api_key", "OpenRouter API key")
    provider = OpenRouterProvider(api_key=api_key)
    model = OpenRouterModel(model_name=settings.model_id, provider=provider)

    # Single best-effort attempt, no retries
    return Agent(
        model=model,
        output_type=VerificationPayload,
        instructions="You verify photo evidence that an elderly person completed a care activity.",
        retries=0,
    )


def get_verification_agent() -> Agent[None, VerificationPayload]:
    """Get or create the verification agent."""
    if _AgentState.instance is None:
        _AgentState.instance = _create_agent()
    return _AgentState.instance


def normalize_payload(payload: VerificationPayload | None) -> VerificationResult:
    """Fill missing fields with conservative defaults."""
    if payload is None:
        raise VerificationServiceError("Verification service returned no answer")

    confidence = payload.confidence if payload.confidence is not None else 0.0
    return VerificationResult(
        verified=bool(payload.verified),
        reason=payload.reason or FALLBACK_REASON,
        confidence=min(max(confidence, 0.0), 1.0),
    )


class VerificationClient:
    """Asks the vision model whether a photo shows the expected activity."""

    async def verify(
        self,
        photo: bytes,
        activity: ActivityType,
        *,
        mime_type: str = constants.DEFAULT_IMAGE_MIME_TYPE,
    ) -> VerificationResult:
        """Verify a photo; never raises.

        Args:
            photo: Raw image bytes
            activity: Activity the photo should show
            mime_type: Image media type

        Returns:
            Normalized result; any failure yields verified=False with a diagnostic reason
        """
        with span("verification_service.verify"):
            try:
                agent = get_verification_agent()
                run_result = await agent.run(
                    [build_prompt(activity), BinaryContent(data=photo, media_type=mime_type)],
                )
                result = normalize_payload(run_result.output)
            except Exception as e:
                category, message = classify_service_error(e)
                logger.exception("AI verification failed (category=%s)", category.value)
                return VerificationResult(verified=False, reason=message, confidence=0.0)

            log_with_context(
                logger,
                "info",
                "Photo verification finished",
                activity=activity.value,
                verified=result.verified,
                confidence=result.confidence,
            )
            return result
