"""Errors raised by the tasks feature"""


class TaskError(Exception):
    """Base class for task feature errors"""


class InvalidInputError(TaskError, ValueError):
    """Raised when user-supplied task fields or filters fail validation"""


class TaskNotFoundError(TaskError, LookupError):
    """Raised when a task does not exist, or is soft-deleted where that matters"""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")
