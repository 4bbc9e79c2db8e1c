"""SQLAlchemy repository for Tasks"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import Select, and_, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

# SQLAlchemy ORM models
from labflow.db.functions import unicode_lower
from labflow.db.models.task import Task as TaskORM

# Pydantic domain models (feature-local)
from labflow.features.tasks.domain import (
    SortDirection,
    SortKey,
    Task,
    TaskListQuery,
    TaskStatus,
)
from labflow.utils.datetime_helper import utc_today

logger = logging.getLogger(__name__)


SORT_COLUMNS = {
    SortKey.CREATED_AT: TaskORM.created_at_utc,
    SortKey.DUE_DATE: TaskORM.due_date,
    SortKey.PRIORITY: TaskORM.priority,
    SortKey.STATUS: TaskORM.status,
}


class TaskRepository:
    """Repository for Task operations using SQLAlchemy"""

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: SQLAlchemy async database session
        """
        self.db = db

    async def get_task_by_id(self, task_id: int) -> Optional[Task]:
        """
        Get a task by ID, including soft-deleted tasks.

        Returns:
            Task domain model or None if no row has this ID
        """
        # populate_existing refreshes rows already in the identity map after UPDATE statements
        stmt = (
            select(TaskORM)
            .where(TaskORM.id == task_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        orm_task = result.scalar_one_or_none()

        if not orm_task:
            return None

        return self._to_domain_model(orm_task)

    def build_filtered_query(
        self,
        query: TaskListQuery,
        today: Optional[date] = None,
    ) -> Select:
        """
        Build the SELECT for a list request, without ordering or paging.

        Filters are applied in a fixed order and combined with AND:
        soft-delete, status, priority, free text, due range, overdue.
        """
        stmt = select(TaskORM).where(TaskORM.is_deleted.is_(False))

        if query.status is not None:
            stmt = stmt.where(TaskORM.status == query.status.value)

        if query.priority is not None:
            stmt = stmt.where(TaskORM.priority == query.priority.value)

        if query.q:
            # Fold both sides so non-ASCII letters match regardless of case
            needle = query.q.lower()
            stmt = stmt.where(
                or_(
                    unicode_lower(TaskORM.title).contains(needle, autoescape=True),
                    and_(
                        TaskORM.description.is_not(None),
                        unicode_lower(TaskORM.description).contains(needle, autoescape=True),
                    ),
                )
            )

        # Tasks without a due date never match a due range
        if query.due_from is not None:
            stmt = stmt.where(
                and_(TaskORM.due_date.is_not(None), TaskORM.due_date >= query.due_from)
            )

        if query.due_to is not None:
            stmt = stmt.where(
                and_(TaskORM.due_date.is_not(None), TaskORM.due_date <= query.due_to)
            )

        if query.overdue:
            if today is None:
                today = utc_today()
            stmt = stmt.where(
                and_(
                    TaskORM.due_date.is_not(None),
                    TaskORM.due_date < today,
                    TaskORM.status != TaskStatus.DONE.value,
                )
            )

        return stmt

    @staticmethod
    def apply_ordering(stmt: Select, sort_by: SortKey, sort_dir: SortDirection) -> Select:
        """
        Order by the selected column, then by id so that paging is stable.

        Priority and status order by their labels, not by rank. Missing due
        dates sort as the smallest value.
        """
        column = SORT_COLUMNS.get(sort_by, TaskORM.created_at_utc)
        if sort_dir == SortDirection.ASC:
            primary = column.asc().nulls_first()
        else:
            primary = column.desc().nulls_last()
        return stmt.order_by(primary, TaskORM.id.asc())

    async def list_tasks(
        self,
        query: TaskListQuery,
        today: Optional[date] = None,
    ) -> Tuple[List[Task], int]:
        """
        List tasks matching the query.

        Args:
            query: Canonical filter, sort and paging parameters
            today: Reference date for the overdue filter (defaults to the current UTC date)

        Returns:
            Tuple of (tasks on the requested page, total number of matching tasks)
        """
        filtered = self.build_filtered_query(query, today)

        count_stmt = select(func.count()).select_from(filtered.subquery())
        total_count = (await self.db.execute(count_stmt)).scalar_one()

        page_stmt = (
            self.apply_ordering(filtered, query.sort_by, query.sort_dir)
            .offset(query.offset)
            .limit(query.page_size)
        )
        result = await self.db.execute(page_stmt)
        tasks = [self._to_domain_model(row) for row in result.scalars().all()]

        logger.debug(
            f"Listed {len(tasks)} of {total_count} tasks "
            f"(page={query.page}, page_size={query.page_size}, "
            f"sort={query.sort_by.value} {query.sort_dir.value})"
        )
        return tasks, total_count

    async def create_task(self, values: Dict[str, Any]) -> Task:
        """
        Insert a new task row.

        Args:
            values: Column values; the ID is always assigned by the database

        Returns:
            The created Task domain model
        """
        values = {k: v for k, v in values.items() if k != "id"}
        orm_task = TaskORM(**values)
        self.db.add(orm_task)
        await self._commit()
        await self.db.refresh(orm_task)
        return self._to_domain_model(orm_task)

    async def update_task(
        self,
        task_id: int,
        values: Dict[str, Any],
        *,
        only_active: bool = True,
    ) -> Optional[Task]:
        """
        Update columns of a single task in one statement.

        Args:
            task_id: The task ID
            values: Column values to set
            only_active: Skip soft-deleted rows

        Returns:
            The updated Task, or None if no matching row was changed
        """
        conditions = [TaskORM.id == task_id]
        if only_active:
            conditions.append(TaskORM.is_deleted.is_(False))

        stmt = (
            update(TaskORM)
            .where(and_(*conditions))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        await self._commit()

        if result.rowcount == 0:
            return None

        return await self.get_task_by_id(task_id)

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    def _to_domain_model(self, orm_task: TaskORM) -> Task:
        return Task.model_validate(orm_task)
