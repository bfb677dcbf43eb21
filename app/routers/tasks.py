# =============================================================================
# app/routers/tasks.py - Task Status Endpoints
# =============================================================================
# Polling endpoints for background tasks (ledger writes, similarity runs).
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, HTTPException
from pydantic import BaseModel

from app.auth import get_current_user, AuthUser

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class TaskStatusResponse(BaseModel):
    """Response model for task status."""
    task_id: str
    status: str
    progress: int | None = None
    message: str | None = None
    result: dict | None = None
    error: str | None = None


class TaskSubmitResponse(BaseModel):
    """Response model for endpoints that queue a task."""
    task_id: str
    status: str = "PENDING"
    message: str


def describe_task(task_id: str, result) -> TaskStatusResponse:
    """Map a Celery AsyncResult onto the status response."""
    response = TaskStatusResponse(task_id=task_id, status=result.status)

    if result.status == "PROGRESS":
        info = result.info or {}
        response.progress = info.get("percent", 0)
        response.message = info.get("message", "Processing...")

    elif result.status == "SUCCESS":
        response.result = result.result
        response.progress = 100
        response.message = "Complete"

    elif result.status == "FAILURE":
        response.error = str(result.result) if result.result else "Unknown error"
        response.message = "Failed"

    elif result.status == "PENDING":
        response.progress = 0
        response.message = "Waiting in queue..."

    elif result.status == "STARTED":
        response.progress = 0
        response.message = "Starting..."

    return response


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Get the status of a background task.

    - PENDING: Task is waiting in queue
    - STARTED: Task has been picked up by a worker
    - PROGRESS: Task is running (includes progress percentage)
    - SUCCESS: Task completed (includes result)
    - FAILURE: Task failed (includes error)
    """
    try:
        from workers.celery_app import celery_app

        return describe_task(task_id, celery_app.AsyncResult(task_id))

    except Exception as e:
        logger.error(f"Error getting task status: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {e}")


@router.get("/{task_id}/result")
async def get_task_result(
    task_id: Annotated[str, Path(description="Celery task ID")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Get the result of a completed task.

    For unfinished tasks, returns status info only.
    """
    try:
        from workers.celery_app import celery_app

        result = celery_app.AsyncResult(task_id)

        if result.status == "SUCCESS":
            return {
                "task_id": task_id,
                "status": "SUCCESS",
                "result": result.result,
            }

        elif result.status == "FAILURE":
            return {
                "task_id": task_id,
                "status": "FAILURE",
                "error": str(result.result) if result.result else "Unknown error",
            }

        else:
            return {
                "task_id": task_id,
                "status": result.status,
                "message": "Task not yet complete",
            }

    except Exception as e:
        logger.error(f"Error getting task result: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get task result: {e}")
