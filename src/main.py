"""eldercare-guard - Activity reminders with photo proof for elderly people."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import Settings, settings
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.scheduler import start_scheduler, stop_scheduler
from src.domain.activity import CareProfile, FamilyContact
from src.interface.api_router import router as api_router
from src.services.task_registry import DEFAULT_TASKS, TaskRegistry
from src.services.workflow_service import AlarmWorkflow


logger = logging.getLogger(__name__)


def build_workflow(config: Settings) -> AlarmWorkflow:
    """Assemble the orchestrator and its collaborators from settings."""
    profile = CareProfile(
        user_name=config.user_name,
        contact=FamilyContact(name=config.family_contact_name, phone=config.family_contact_phone),
    )
    registry = TaskRegistry(DEFAULT_TASKS if config.seed_default_tasks else ())
    return AlarmWorkflow(profile=profile, registry=registry)


def validate_startup_configuration(config: Settings) -> None:
    """Warn about missing credentials; the service still starts."""
    if not config.openrouter_api_key:
        logger.warning("startup_validation", extra={"service": "openrouter", "status": "missing_credentials"})
    if config.notification_channel == "log":
        logger.warning("startup_validation", extra={"service": "waha", "status": "simulated"})
    logger.info("startup_validation_complete", extra={"status": "ok"})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so validation logs are captured
    configure_logfire()
    validate_startup_configuration(settings)

    app.state.workflow = build_workflow(settings)
    start_scheduler(app.state.workflow)
    yield
    stop_scheduler()


app = FastAPI(
    title="eldercare-guard",
    description="Activity reminders with photo proof, relayed to family over WhatsApp",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

# Register routers
app.include_router(api_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
