"""Tasks feature module"""

from labflow.features.tasks.domain import (
    Priority,
    SortDirection,
    SortKey,
    Task,
    TaskListQuery,
    TaskStatus,
)
from labflow.features.tasks.exceptions import InvalidInputError, TaskError, TaskNotFoundError
from labflow.features.tasks.schemas import (
    PagedResult,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from labflow.features.tasks.repository import TaskRepository
from labflow.features.tasks.service import TaskService
from labflow.features.tasks.api import router

__all__ = [
    "router",
    "TaskRepository",
    "TaskService",
    "Task",
    "TaskListQuery",
    "Priority",
    "TaskStatus",
    "SortKey",
    "SortDirection",
    "PagedResult",
    "TaskCreateRequest",
    "TaskUpdateRequest",
    "TaskResponse",
    "TaskError",
    "InvalidInputError",
    "TaskNotFoundError",
]
