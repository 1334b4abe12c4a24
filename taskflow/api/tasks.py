from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query, Response, status
from ..dependencies.auth import get_current_user
from ..dependencies.services import get_insight_generator, get_task_service
from ..models import User
from ..schemas.task import InsightsRequest, InsightsResponse, TaskRead
from ..services.insights import InsightGenerator
from ..services.tasks import TaskService

router = APIRouter()


@router.get("", response_model=List[TaskRead])
def list_tasks(
    status: Optional[str] = Query(None, pattern="^(pending|in-progress|done)$"),
    priority: Optional[str] = Query(None, pattern="^(low|medium|high)$"),
    tag: Optional[str] = None,
    search: Optional[str] = None,
    user: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    """List the caller's tasks, newest first."""
    return tasks.list_tasks(user.id, status=status, priority=priority, tag=tag, search=search)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: Dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    """Create a task.

    ``priority``, ``dueDate`` and ``tags`` may be sent top-level or inside
    ``extras``; top-level values win.
    """
    return tasks.create_task(user.id, payload)


@router.post("/insights", response_model=InsightsResponse)
def generate_insights(
    request: InsightsRequest,
    user: User = Depends(get_current_user),
    insights: InsightGenerator = Depends(get_insight_generator),
):
    """Summarize the given tasks. Falls back to a fixed message if the model is unavailable."""
    return insights.generate(user.id, request.tasks)


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: str,
    user: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    return tasks.get_task(user.id, task_id)


@router.put("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: str,
    payload: Dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    """Partially update a task. Custom ``extras`` keys are merged, not replaced."""
    return tasks.update_task(user.id, task_id, payload)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    user: User = Depends(get_current_user),
    tasks: TaskService = Depends(get_task_service),
):
    tasks.delete_task(user.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
