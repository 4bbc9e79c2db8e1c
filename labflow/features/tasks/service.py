"""Business logic for Tasks"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from labflow.features.tasks.domain import Task, TaskListQuery
from labflow.features.tasks.exceptions import TaskNotFoundError
from labflow.features.tasks.repository import TaskRepository
from labflow.features.tasks.schemas import PagedResult, TaskResponse, TaskWriteRequest
from labflow.features.tasks.validation import normalize_task_fields
from labflow.utils.datetime_helper import later_of, utc_now

logger = logging.getLogger(__name__)


class TaskService:
    """
    Service layer for the task lifecycle.

    Business rules:
    - Tasks are never physically removed; delete sets is_deleted
    - created_at_utc is written once, updated_at_utc on every later mutation
    - Soft-deleted tasks cannot be updated or deleted again, only restored
    """

    def __init__(self, db: AsyncSession):
        self.repository = TaskRepository(db)

    async def list_tasks(
        self,
        query: TaskListQuery,
        today: Optional[date] = None,
    ) -> PagedResult[TaskResponse]:
        """Filter, sort and page active tasks into a page envelope"""
        tasks, total_count = await self.repository.list_tasks(query, today)
        return PagedResult[TaskResponse](
            page=query.page,
            page_size=query.page_size,
            total_count=total_count,
            items=[TaskResponse.model_validate(task) for task in tasks],
        )

    async def get_task(self, task_id: int) -> Task:
        """
        Direct lookup by ID. Soft-deleted tasks are returned too.

        Raises:
            TaskNotFoundError: If no task has this ID
        """
        task = await self.repository.get_task_by_id(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    async def create_task(self, request: TaskWriteRequest) -> Task:
        """
        Create a task from a validated request.

        Raises:
            InvalidInputError: If the title, priority or status are invalid
        """
        fields = normalize_task_fields(
            request.title,
            request.description,
            request.priority,
            request.status,
            request.due_date,
        )

        values = fields.to_row_values()
        values.update(
            created_at_utc=utc_now(),
            updated_at_utc=None,
            is_deleted=False,
        )
        task = await self.repository.create_task(values)
        logger.info(f"Created task {task.id} (priority={task.priority}, status={task.status})")
        return task

    async def update_task(self, task_id: int, request: TaskWriteRequest) -> Task:
        """
        Replace all mutable fields of an active task.

        Validation runs before the lookup, so an invalid body on a missing task
        reports the validation error.

        Raises:
            InvalidInputError: If the request fields are invalid
            TaskNotFoundError: If the task does not exist or is soft-deleted
        """
        fields = normalize_task_fields(
            request.title,
            request.description,
            request.priority,
            request.status,
            request.due_date,
        )

        existing = await self._get_active_task(task_id)

        values = fields.to_row_values()
        values["updated_at_utc"] = self._next_timestamp(existing)
        task = await self.repository.update_task(task_id, values)
        if task is None:
            # Deleted concurrently between the lookup and the update
            raise TaskNotFoundError(task_id)

        logger.info(f"Updated task {task_id}")
        return task

    async def delete_task(self, task_id: int) -> None:
        """
        Soft-delete an active task.

        Raises:
            TaskNotFoundError: If the task does not exist or is already deleted
        """
        existing = await self._get_active_task(task_id)

        task = await self.repository.update_task(
            task_id,
            {"is_deleted": True, "updated_at_utc": self._next_timestamp(existing)},
        )
        if task is None:
            raise TaskNotFoundError(task_id)

        logger.info(f"Soft-deleted task {task_id}")

    async def restore_task(self, task_id: int) -> Task:
        """
        Clear the soft-delete flag. Restoring an active task succeeds and only
        refreshes updated_at_utc.

        Raises:
            TaskNotFoundError: If no task has this ID
        """
        existing = await self.get_task(task_id)
        was_deleted = existing.is_deleted

        task = await self.repository.update_task(
            task_id,
            {"is_deleted": False, "updated_at_utc": self._next_timestamp(existing)},
            only_active=False,
        )
        if task is None:
            raise TaskNotFoundError(task_id)

        if was_deleted:
            logger.info(f"Restored task {task_id}")
        else:
            logger.info(f"Restore requested for active task {task_id}; nothing to undo")
        return task

    async def _get_active_task(self, task_id: int) -> Task:
        task = await self.repository.get_task_by_id(task_id)
        if task is None or task.is_deleted:
            logger.warning(f"Task {task_id} not found or deleted")
            raise TaskNotFoundError(task_id)
        return task

    @staticmethod
    def _next_timestamp(existing: Task):
        # Never earlier than what is already recorded for the task
        return later_of(utc_now(), existing.created_at_utc, existing.updated_at_utc)
