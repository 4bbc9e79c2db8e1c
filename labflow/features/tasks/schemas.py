"""Request and response schemas for Tasks API"""

from datetime import date, datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from labflow.utils.datetime_helper import to_calendar_date

T = TypeVar("T")


class TaskWriteRequest(BaseModel):
    """
    Body for creating or replacing a task.

    Fields are loosely typed on purpose: blank titles and unknown labels are
    reported by the validation layer with a readable message. Any "id" sent by
    the client is ignored.
    """
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[date] = None

    @field_validator("due_date", mode="before")
    @classmethod
    def _drop_time_of_day(cls, value):
        if isinstance(value, (str, datetime)):
            return to_calendar_date(value)
        return value


class TaskCreateRequest(TaskWriteRequest):
    """Request model for creating a task"""
    pass


class TaskUpdateRequest(TaskWriteRequest):
    """Request model for updating a task (full replacement of mutable fields)"""
    pass


class TaskResponse(BaseModel):
    """Task as returned to API clients"""
    model_config = ConfigDict(
        populate_by_name=True,
        alias_generator=to_camel,
        from_attributes=True,
    )

    id: int
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    due_date: Optional[date] = None
    created_at_utc: datetime
    updated_at_utc: Optional[datetime] = None
    is_deleted: bool = False


class PagedResult(BaseModel, Generic[T]):
    """One page of results plus the total number of matches"""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    page: int
    page_size: int
    total_count: int
    items: List[T]
