from src.services import (
    alarm_controller,
    clock_service,
    notification_service,
    task_registry,
    verification_service,
    workflow_service,
)


__all__ = [
    "alarm_controller",
    "clock_service",
    "notification_service",
    "task_registry",
    "verification_service",
    "workflow_service",
]
