"""
Validation and normalization of user-supplied task values.

Everything here is pure: raw strings go in, canonical values come out, or an
InvalidInputError explains what was wrong.

Two flavours exist for the enumerated fields:
- strict (validate_task_fields, parse_*_filter) rejects unknown labels
- lenient (normalize_priority, normalize_status) maps unknown labels to the
  Medium / Todo defaults
"""

from datetime import date, datetime
from typing import Optional

from labflow.features.tasks.domain import (
    NormalizedTaskFields,
    Priority,
    SortDirection,
    SortKey,
    TaskListQuery,
    TaskStatus,
)
from labflow.features.tasks.exceptions import InvalidInputError
from labflow.utils.datetime_helper import to_calendar_date

MAX_TITLE_LENGTH = 200

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Largest page whose offset still fits a signed 64-bit SQL integer
MAX_PAGE = (2**63 - 1) // MAX_PAGE_SIZE

DEFAULT_PRIORITY = Priority.MEDIUM
DEFAULT_STATUS = TaskStatus.TODO


def validate_task_fields(
    title: Optional[str],
    priority: Optional[str],
    status: Optional[str],
) -> None:
    """
    Check the required task fields. The first failing rule wins.

    Raises:
        InvalidInputError: With a message suitable for the API client
    """
    if title is None or not title.strip():
        raise InvalidInputError("Title is required.")

    if len(title.strip()) > MAX_TITLE_LENGTH:
        raise InvalidInputError(f"Title must be {MAX_TITLE_LENGTH} characters or less.")

    if Priority.parse(priority) is None:
        raise InvalidInputError("Priority must be Low, Medium, or High.")

    if TaskStatus.parse(status) is None:
        raise InvalidInputError("Status must be Todo, InProgress, or Done.")


def normalize_priority(value: Optional[str]) -> Priority:
    return Priority.parse(value) or DEFAULT_PRIORITY


def normalize_status(value: Optional[str]) -> TaskStatus:
    return TaskStatus.parse(value) or DEFAULT_STATUS


def normalize_description(value: Optional[str]) -> Optional[str]:
    """Trimmed description; blank input is stored as absent."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_task_fields(
    title: Optional[str],
    description: Optional[str],
    priority: Optional[str],
    status: Optional[str],
    due_date: Optional[date | datetime | str] = None,
) -> NormalizedTaskFields:
    """
    Validate and canonicalize the fields of a create or update request.

    Raises:
        InvalidInputError: If validation fails
    """
    validate_task_fields(title, priority, status)

    try:
        due = to_calendar_date(due_date)
    except ValueError:
        raise InvalidInputError("Due date must be an ISO 8601 date.")

    return NormalizedTaskFields(
        title=title.strip(),  # type: ignore[union-attr]
        description=normalize_description(description),
        priority=normalize_priority(priority),
        status=normalize_status(status),
        due_date=due,
    )


def parse_priority_filter(value: Optional[str]) -> Optional[Priority]:
    """
    Priority filter from a query parameter. Blank means no filter.

    Raises:
        InvalidInputError: If the value is not a known priority
    """
    if value is None or not value.strip():
        return None
    priority = Priority.parse(value)
    if priority is None:
        raise InvalidInputError("Priority filter must be Low, Medium, or High.")
    return priority


def parse_status_filter(value: Optional[str]) -> Optional[TaskStatus]:
    """
    Status filter from a query parameter. Blank means no filter.

    Raises:
        InvalidInputError: If the value is not a known status
    """
    if value is None or not value.strip():
        return None
    status = TaskStatus.parse(value)
    if status is None:
        raise InvalidInputError("Status filter must be Todo, InProgress, or Done.")
    return status


def parse_search_term(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def parse_sort_key(value: Optional[str]) -> SortKey:
    """Unknown or missing sort keys fall back to createdAt"""
    if value:
        key = value.strip().lower()
        for member in SortKey:
            if member.value.lower() == key:
                return member
    return SortKey.CREATED_AT


def parse_sort_direction(value: Optional[str]) -> SortDirection:
    """Only an explicit "asc" sorts ascending"""
    if value and value.strip().lower() == SortDirection.ASC.value:
        return SortDirection.ASC
    return SortDirection.DESC


def clamp_page(page: Optional[int]) -> int:
    """Pages below 1 become 1; pages past the offset limit are capped"""
    if page is None or page < 1:
        return DEFAULT_PAGE
    return min(page, MAX_PAGE)


def clamp_page_size(page_size: Optional[int]) -> int:
    """Out-of-range sizes reset to the default instead of being capped"""
    if page_size is None or page_size < 1 or page_size > MAX_PAGE_SIZE:
        return DEFAULT_PAGE_SIZE
    return page_size


def build_list_query(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    q: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = None,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    due_from: Optional[date | datetime | str] = None,
    due_to: Optional[date | datetime | str] = None,
    overdue: Optional[bool] = None,
) -> TaskListQuery:
    """
    Turn raw list parameters into a TaskListQuery.

    Paging values are clamped rather than rejected; enum filters are strict.

    Raises:
        InvalidInputError: For unknown status/priority filters or unparseable dates
    """
    try:
        due_from_date = to_calendar_date(due_from)
        due_to_date = to_calendar_date(due_to)
    except ValueError:
        raise InvalidInputError("dueFrom and dueTo must be ISO 8601 dates.")

    return TaskListQuery(
        status=parse_status_filter(status),
        priority=parse_priority_filter(priority),
        q=parse_search_term(q),
        due_from=due_from_date,
        due_to=due_to_date,
        overdue=bool(overdue),
        sort_by=parse_sort_key(sort_by),
        sort_dir=parse_sort_direction(sort_dir),
        page=clamp_page(page),
        page_size=clamp_page_size(page_size),
    )
