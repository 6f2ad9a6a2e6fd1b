"""Task registry: the ordered, in-memory set of daily activity reminders.

Every mutation replaces the stored ActivityTask with a new instance, so any
holder of a previously returned task keeps a consistent snapshot.
"""

import logging
import secrets
from datetime import time

from src.core.logging import span
from src.domain.activity import ActivityTask, ActivityType
from src.domain.create_models import ActivityTaskCreate
from src.domain.update_models import ActivityTaskUpdate


logger = logging.getLogger(__name__)


DEFAULT_TASKS: tuple[ActivityTask, ...] = (
    ActivityTask(id="1", type=ActivityType.PILLS, label="Morning medication", scheduled_time=time(8, 0)),
    ActivityTask(id="2", type=ActivityType.WATER, label="Drink water", scheduled_time=time(10, 30)),
    ActivityTask(id="3", type=ActivityType.FOOD, label="Healthy lunch", scheduled_time=time(13, 0)),
    ActivityTask(id="4", type=ActivityType.PILLS, label="Afternoon medication", scheduled_time=time(16, 0)),
    ActivityTask(id="5", type=ActivityType.WATER, label="Drink water", scheduled_time=time(19, 0)),
)


def generate_task_id() -> str:
    """Generate a short random task ID."""
    return secrets.token_hex(5)


class TaskRegistry:
    """Owns every ActivityTask; preserves insertion order."""

    def __init__(self, tasks: list[ActivityTask] | tuple[ActivityTask, ...] = ()) -> None:
        self._tasks: list[ActivityTask] = list(tasks)

    def list_tasks(self) -> list[ActivityTask]:
        """All tasks in registry order."""
        return list(self._tasks)

    def pending(self) -> list[ActivityTask]:
        """Incomplete tasks in registry order."""
        return [t for t in self._tasks if not t.completed]

    def completed(self) -> list[ActivityTask]:
        """Completed tasks in registry order (today's history)."""
        return [t for t in self._tasks if t.completed]

    def progress(self) -> tuple[int, int]:
        """Return (completed_count, total_count)."""
        return len(self.completed()), len(self._tasks)

    def find_by_id(self, task_id: str) -> ActivityTask | None:
        """Return the task with this ID, or None."""
        return next((t for t in self._tasks if t.id == task_id), None)

    def add(self, task: ActivityTask | ActivityTaskCreate) -> ActivityTask:
        """Append a task, generating an ID for create payloads.

        Raises:
            ValueError: If a task with the same ID already exists
        """
        with span("task_registry.add"):
            if isinstance(task, ActivityTaskCreate):
                task = ActivityTask(id=generate_task_id(), **task.model_dump())
            if self.find_by_id(task.id) is not None:
                msg = f"Task {task.id} already exists"
                raise ValueError(msg)

            self._tasks = [*self._tasks, task]
            logger.info("Added task %s (%s at %s)", task.id, task.type, task.time_key)
            return task

    def remove(self, task_id: str) -> ActivityTask | None:
        """Remove a task; unknown IDs are ignored."""
        with span("task_registry.remove"):
            task = self.find_by_id(task_id)
            if task is None:
                logger.warning("Ignoring removal of unknown task %s", task_id)
                return None

            self._tasks = [t for t in self._tasks if t.id != task_id]
            logger.info("Removed task %s", task_id)
            return task

    def _replace(self, task_id: str, **changes: object) -> ActivityTask | None:
        current = self.find_by_id(task_id)
        if current is None:
            logger.warning("Ignoring update of unknown task %s", task_id)
            return None

        # model_validate re-runs validation, model_copy would not
        updated = ActivityTask.model_validate({**current.model_dump(), **changes})
        self._tasks = [updated if t.id == task_id else t for t in self._tasks]
        return updated

    def update(self, task_id: str, changes: ActivityTaskUpdate) -> ActivityTask | None:
        """Apply the fields explicitly set in `changes`; unknown IDs are ignored."""
        with span("task_registry.update"):
            fields = changes.model_dump(exclude_unset=True, exclude_none=True)
            updated = self._replace(task_id, **fields)
            if updated is not None:
                logger.info("Updated task %s fields=%s", task_id, sorted(fields))
            return updated

    def rename(self, task_id: str, label: str) -> ActivityTask | None:
        """Change the label of a task."""
        return self.update(task_id, ActivityTaskUpdate(label=label))

    def reschedule(self, task_id: str, scheduled_time: time) -> ActivityTask | None:
        """Change the time of day a task fires."""
        return self.update(task_id, ActivityTaskUpdate(scheduled_time=scheduled_time))

    def change_type(self, task_id: str, activity_type: ActivityType) -> ActivityTask | None:
        """Change the activity kind of a task."""
        return self.update(task_id, ActivityTaskUpdate(type=activity_type))

    def mark_completed(self, task_id: str, *, photo_evidence: str, verified_at: str) -> ActivityTask | None:
        """Record verified completion of a task; unknown IDs are ignored."""
        with span("task_registry.mark_completed"):
            updated = self._replace(
                task_id,
                completed=True,
                photo_evidence=photo_evidence,
                verified_at=verified_at,
            )
            if updated is not None:
                logger.info("Marked task %s completed at %s", task_id, verified_at)
            return updated
