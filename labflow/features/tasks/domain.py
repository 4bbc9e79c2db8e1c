"""Domain models for Tasks feature"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Priority(str, Enum):
    """Task priority; values are the canonical labels"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Priority"]:
        """Case-insensitive lookup, None when the value is not a known priority"""
        if value is None:
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


class TaskStatus(str, Enum):
    """Task workflow status; values are the canonical labels"""
    TODO = "Todo"
    IN_PROGRESS = "InProgress"
    DONE = "Done"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["TaskStatus"]:
        """Case-insensitive lookup, None when the value is not a known status"""
        if value is None:
            return None
        key = value.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


class SortKey(str, Enum):
    """Columns the task list can be ordered by"""
    CREATED_AT = "createdAt"
    DUE_DATE = "dueDate"
    PRIORITY = "priority"
    STATUS = "status"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Task(BaseModel):
    """Complete task domain model"""
    id: int
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    due_date: Optional[date] = None
    created_at_utc: datetime
    updated_at_utc: Optional[datetime] = None
    is_deleted: bool = False

    model_config = ConfigDict(from_attributes=True)


class NormalizedTaskFields(BaseModel):
    """Validated, canonical values for the mutable task fields"""
    title: str
    description: Optional[str] = None
    priority: Priority
    status: TaskStatus
    due_date: Optional[date] = None

    model_config = ConfigDict(frozen=True)

    def to_row_values(self) -> dict:
        """Column values as stored in the tasks table"""
        return {
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "status": self.status.value,
            "due_date": self.due_date,
        }


class TaskListQuery(BaseModel):
    """
    Canonical parameters for listing tasks.

    Every filter is optional; set filters are combined with AND.
    """
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    q: Optional[str] = None
    due_from: Optional[date] = None
    due_to: Optional[date] = None
    overdue: bool = False
    sort_by: SortKey = SortKey.CREATED_AT
    sort_dir: SortDirection = SortDirection.DESC
    page: int = 1
    page_size: int = 20

    model_config = ConfigDict(frozen=True)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size
