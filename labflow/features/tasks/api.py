"""Tasks API endpoints"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status as http_status
from sqlalchemy.ext.asyncio import AsyncSession

from labflow.db import get_db
from labflow.features.tasks.exceptions import InvalidInputError, TaskNotFoundError
from labflow.features.tasks.schemas import (
    PagedResult,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from labflow.features.tasks.service import TaskService
from labflow.features.tasks.validation import build_list_query

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=PagedResult[TaskResponse])
async def list_tasks(
    status: Optional[str] = Query(None, description="Todo, InProgress or Done"),
    priority: Optional[str] = Query(None, description="Low, Medium or High"),
    q: Optional[str] = Query(None, description="Text to find in title or description"),
    sort_by: Optional[str] = Query("createdAt", alias="sortBy", description="dueDate, priority, status or createdAt"),
    sort_dir: Optional[str] = Query("desc", alias="sortDir", description="asc or desc"),
    page: int = Query(1),
    page_size: int = Query(20, alias="pageSize"),
    due_from: Optional[datetime] = Query(None, alias="dueFrom"),
    due_to: Optional[datetime] = Query(None, alias="dueTo"),
    overdue: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """
    List active (not soft-deleted) tasks.

    Filters are combined with AND. Invalid paging values fall back to
    page 1 / pageSize 20. Unknown sort keys sort by createdAt.

    Returns:
        Page envelope with page, pageSize, totalCount and items

    Raises:
        400: Unknown status or priority filter
        500: Server error during processing
    """
    try:
        query = build_list_query(
            status=status,
            priority=priority,
            q=q,
            sort_by=sort_by,
            sort_dir=sort_dir,
            page=page,
            page_size=page_size,
            due_from=due_from,
            due_to=due_to,
            overdue=overdue,
        )
        service = TaskService(db)
        return await service.list_tasks(query)

    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to list tasks")
        raise HTTPException(status_code=500, detail=f"Failed to list tasks: {str(e)}")


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single task by ID, including soft-deleted tasks"""
    try:
        service = TaskService(db)
        task = await service.get_task(task_id)
        return TaskResponse.model_validate(task)

    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to fetch task {task_id}")
        raise HTTPException(status_code=500, detail=f"Failed to fetch task: {str(e)}")


@router.post("", response_model=TaskResponse, status_code=http_status.HTTP_201_CREATED)
async def create_task(
    request: TaskCreateRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new task.

    Title is trimmed and limited to 200 characters; priority and status are
    matched case-insensitively and stored in canonical casing.

    Raises:
        400: Validation failed
    """
    try:
        service = TaskService(db)
        task = await service.create_task(request)
        response.headers["Location"] = f"{router.prefix}/{task.id}"
        return TaskResponse.model_validate(task)

    except InvalidInputError as e:
        logger.info(f"Rejected task creation: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Failed to create task")
        raise HTTPException(status_code=500, detail=f"Failed to create task: {str(e)}")


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    request: TaskUpdateRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Replace the mutable fields of a task.

    Raises:
        400: Validation failed
        404: Task not found or soft-deleted
    """
    try:
        service = TaskService(db)
        task = await service.update_task(task_id, request)
        return TaskResponse.model_validate(task)

    except InvalidInputError as e:
        logger.info(f"Rejected update of task {task_id}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to update task {task_id}")
        raise HTTPException(status_code=500, detail=f"Failed to update task: {str(e)}")


@router.delete("/{task_id}", status_code=http_status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: int, db: AsyncSession = Depends(get_db)):
    """
    Soft-delete a task. The row is kept and can be restored.

    Raises:
        404: Task not found or already deleted
    """
    try:
        service = TaskService(db)
        await service.delete_task(task_id)
        return Response(status_code=http_status.HTTP_204_NO_CONTENT)

    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to delete task {task_id}")
        raise HTTPException(status_code=500, detail=f"Failed to delete task: {str(e)}")


@router.post("/{task_id}/restore", response_model=TaskResponse)
async def restore_task(task_id: int, db: AsyncSession = Depends(get_db)):
    """
    Restore a soft-deleted task. Restoring an active task is not an error.

    Raises:
        404: Task not found
    """
    try:
        service = TaskService(db)
        task = await service.restore_task(task_id)
        return TaskResponse.model_validate(task)

    except TaskNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to restore task {task_id}")
        raise HTTPException(status_code=500, detail=f"Failed to restore task: {str(e)}")
