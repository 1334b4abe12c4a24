"""Task operations: validate, normalize, persist, respond."""

import logging
from typing import Any, List, Optional

from ..crud import TaskStore
from ..errors import NotFoundError
from ..schemas.task import TaskRead
from . import normalizer, validator

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


def filter_tasks(
    tasks: List[TaskRead],
    status: Optional[str] = None,
    priority: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
) -> List[TaskRead]:
    """Filter normalized tasks by status, priority, tag, or keyword.

    Args:
        tasks: Tasks to filter
        status: Keep tasks with this status
        priority: Keep tasks with this priority
        tag: Keep tasks carrying this tag (case-insensitive)
        search: Keep tasks whose title or description contains this (case-insensitive)

    Returns:
        Filtered tasks, original order kept
    """
    if status:
        tasks = [t for t in tasks if t.status.value == status]

    if priority:
        tasks = [t for t in tasks if t.priority.value == priority]

    if tag:
        tag_lower = tag.lower()
        tasks = [t for t in tasks if any(tg.lower() == tag_lower for tg in t.tags)]

    if search:
        keyword = search.lower()
        tasks = [
            t for t in tasks
            if keyword in t.title.lower() or keyword in t.description.lower()
        ]

    return tasks


class TaskService:
    """Owner-scoped task operations.

    Attributes:
        store: Task persistence
    """

    def __init__(self, store: TaskStore):
        self.store = store

    def list_tasks(self, owner_id: str, **filters: Optional[str]) -> List[TaskRead]:
        tasks = [normalizer.to_response(t) for t in self.store.list_tasks(owner_id)]
        return filter_tasks(tasks, **filters)

    def get_task(self, owner_id: str, task_id: str) -> TaskRead:
        task = self.store.get_task(owner_id, task_id)
        if task is None:
            raise NotFoundError(TASK_NOT_FOUND)
        return normalizer.to_response(task)

    def create_task(self, owner_id: str, payload: Any) -> TaskRead:
        fields = validator.validate_create(payload)
        task = self.store.add_task(owner_id, normalizer.build_record(fields))
        logger.info(f"Created task {task.id} for {owner_id}")
        return normalizer.to_response(task)

    def update_task(self, owner_id: str, task_id: str, payload: Any) -> TaskRead:
        """Apply a partial update.

        Ownership is checked before the payload is validated, so a caller
        probing someone else's task id always sees NotFound.
        """
        existing = self.store.get_task(owner_id, task_id)
        if existing is None:
            raise NotFoundError(TASK_NOT_FOUND)

        fields = validator.validate_update(payload)
        task = self.store.update_task(owner_id, task_id, normalizer.merge_update(existing, fields))
        if task is None:
            # deleted between the read and the write
            raise NotFoundError(TASK_NOT_FOUND)
        logger.info(f"Updated task {task_id} ({', '.join(sorted(fields))})")
        return normalizer.to_response(task)

    def delete_task(self, owner_id: str, task_id: str) -> None:
        if not self.store.delete_task(owner_id, task_id):
            raise NotFoundError(TASK_NOT_FOUND)
        logger.info(f"Deleted task {task_id}")
