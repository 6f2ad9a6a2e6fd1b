"""HTTP interface consumed by the reminder screen."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from src.core.config import constants
from src.domain.activity import ActivityTask, AlarmSession, FamilyContact, StatusIndicator
from src.domain.create_models import ActivityTaskCreate, FamilyContactCreate
from src.domain.update_models import ActivityTaskUpdate
from src.services.workflow_service import AlarmWorkflow


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["reminders"])


class StateResponse(BaseModel):
    """Everything the reminder screen needs to render."""

    user_name: str
    contact: FamilyContact
    tasks: list[ActivityTask]
    task_states: dict[str, str]
    alarm: AlarmSession | None
    alarm_task: ActivityTask | None
    is_verifying: bool
    is_notifying: bool
    status: StatusIndicator | None
    completed_count: int
    total_count: int


class AlarmResponse(BaseModel):
    alarm: AlarmSession | None


def get_workflow(request: Request) -> AlarmWorkflow:
    """Resolve the orchestrator created during application startup."""
    return request.app.state.workflow


def _task_or_404(task: ActivityTask | None, task_id: str) -> ActivityTask:
    if task is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task {task_id} not found")
    return task


@router.get("/state")
async def get_state(workflow: AlarmWorkflow = Depends(get_workflow)) -> StateResponse:
    snapshot = workflow.snapshot()
    return StateResponse(
        user_name=snapshot.user_name,
        contact=snapshot.contact,
        tasks=snapshot.tasks,
        task_states=snapshot.states,
        alarm=snapshot.alarm,
        alarm_task=snapshot.alarm_task,
        is_verifying=snapshot.is_verifying,
        is_notifying=snapshot.is_notifying,
        status=snapshot.status,
        completed_count=snapshot.completed_count,
        total_count=snapshot.total_count,
    )


@router.get("/tasks")
async def list_tasks(workflow: AlarmWorkflow = Depends(get_workflow)) -> list[ActivityTask]:
    return workflow.registry.list_tasks()


@router.post("/tasks", status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: ActivityTaskCreate,
    workflow: AlarmWorkflow = Depends(get_workflow),
) -> ActivityTask:
    return workflow.add_task(payload)


@router.patch("/tasks/{task_id}")
async def update_task(
    task_id: str,
    payload: ActivityTaskUpdate,
    workflow: AlarmWorkflow = Depends(get_workflow),
) -> ActivityTask:
    return _task_or_404(workflow.update_task(task_id, payload), task_id)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, workflow: AlarmWorkflow = Depends(get_workflow)) -> None:
    _task_or_404(workflow.delete_task(task_id), task_id)


@router.post("/alarm/trigger/{task_id}")
async def trigger_alarm(task_id: str, workflow: AlarmWorkflow = Depends(get_workflow)) -> AlarmResponse:
    _task_or_404(workflow.registry.find_by_id(task_id), task_id)
    return AlarmResponse(alarm=workflow.trigger_alarm_manually(task_id))


@router.post("/alarm/test")
async def trigger_test_alarm(workflow: AlarmWorkflow = Depends(get_workflow)) -> AlarmResponse:
    return AlarmResponse(alarm=workflow.trigger_test_alarm())


@router.post("/alarm/photo")
async def submit_photo(request: Request, workflow: AlarmWorkflow = Depends(get_workflow)) -> StatusIndicator:
    """Accept the raw image bytes as the request body."""
    photo = await request.body()
    if not photo:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty photo")

    mime_type = request.headers.get("content-type", constants.DEFAULT_IMAGE_MIME_TYPE)
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail="Expected an image")

    result = await workflow.submit_photo(photo, mime_type)
    if result is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No alarm is waiting for a photo")
    return result


@router.post("/alarm/cancel")
async def cancel_alarm(workflow: AlarmWorkflow = Depends(get_workflow)) -> dict[str, Any]:
    result = await workflow.cancel_alarm()
    if result is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No alarm can be cancelled right now")
    return {"cancelled": True, "notified": result.notified}


@router.put("/contact")
async def update_contact(
    payload: FamilyContactCreate,
    workflow: AlarmWorkflow = Depends(get_workflow),
) -> FamilyContact:
    return workflow.update_contact(payload)


@router.delete("/status", status_code=status.HTTP_204_NO_CONTENT)
async def clear_status(workflow: AlarmWorkflow = Depends(get_workflow)) -> None:
    workflow.clear_status()
