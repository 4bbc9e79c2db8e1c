# tests/test_service.py

from __future__ import annotations

from datetime import date, timedelta

import pytest

from labflow.features.tasks.exceptions import InvalidInputError, TaskNotFoundError
from labflow.features.tasks.schemas import TaskCreateRequest, TaskUpdateRequest
from labflow.features.tasks.service import TaskService
from labflow.features.tasks.validation import build_list_query


def _create(**overrides) -> TaskCreateRequest:
    body = {"title": "Write spec", "priority": "high", "status": "todo"}
    body.update(overrides)
    return TaskCreateRequest(**body)


async def _listed_ids(service: TaskService, **params) -> list[int]:
    page = await service.list_tasks(build_list_query(**params))
    return [item.id for item in page.items]


@pytest.mark.asyncio
async def test_create_sets_canonical_values_and_timestamps(service: TaskService) -> None:
    task = await service.create_task(_create(description="  ", due_date="2025-09-01"))

    assert task.id > 0
    assert task.priority == "High"
    assert task.status == "Todo"
    assert task.description is None
    assert task.due_date == date(2025, 9, 1)
    assert task.created_at_utc is not None
    assert task.updated_at_utc is None
    assert task.is_deleted is False


@pytest.mark.asyncio
async def test_create_rejects_invalid_input(service: TaskService) -> None:
    with pytest.raises(InvalidInputError):
        await service.create_task(_create(title="x" * 201))
    with pytest.raises(InvalidInputError):
        await service.create_task(_create(priority="critical"))

    page = await service.list_tasks(build_list_query())
    assert page.total_count == 0


@pytest.mark.asyncio
async def test_update_replaces_all_mutable_fields(service: TaskService) -> None:
    task = await service.create_task(_create(description="first", due_date="2025-01-10"))

    updated = await service.update_task(
        task.id,
        TaskUpdateRequest(title=" Renamed ", description=None, priority="LOW", status="inprogress"),
    )

    assert updated.id == task.id
    assert updated.title == "Renamed"
    assert updated.description is None
    assert updated.priority == "Low"
    assert updated.status == "InProgress"
    assert updated.due_date is None
    assert updated.created_at_utc == task.created_at_utc
    assert updated.updated_at_utc is not None
    assert updated.updated_at_utc >= updated.created_at_utc


@pytest.mark.asyncio
async def test_update_of_missing_or_deleted_task_is_not_found(service: TaskService) -> None:
    with pytest.raises(TaskNotFoundError):
        await service.update_task(12345, TaskUpdateRequest(title="x", priority="Low", status="Todo"))

    task = await service.create_task(_create())
    await service.delete_task(task.id)
    with pytest.raises(TaskNotFoundError):
        await service.update_task(task.id, TaskUpdateRequest(title="x", priority="Low", status="Todo"))


@pytest.mark.asyncio
async def test_update_validates_before_lookup(service: TaskService) -> None:
    with pytest.raises(InvalidInputError):
        await service.update_task(12345, TaskUpdateRequest(title="", priority="Low", status="Todo"))


@pytest.mark.asyncio
async def test_delete_restore_round_trip(service: TaskService) -> None:
    created = await service.create_task(_create(description="notes", due_date="2030-01-01"))
    assert await _listed_ids(service) == [created.id]

    await service.delete_task(created.id)
    deleted = await service.get_task(created.id)
    assert deleted.is_deleted is True
    assert deleted.updated_at_utc is not None
    assert deleted.updated_at_utc >= created.created_at_utc
    assert await _listed_ids(service) == []

    restored = await service.restore_task(created.id)
    assert restored.is_deleted is False
    assert restored.updated_at_utc >= deleted.updated_at_utc
    assert await _listed_ids(service) == [created.id]

    ignore = {"updated_at_utc"}
    assert restored.model_dump(exclude=ignore) == created.model_dump(exclude=ignore)


@pytest.mark.asyncio
async def test_delete_twice_is_not_found(service: TaskService) -> None:
    task = await service.create_task(_create())
    await service.delete_task(task.id)

    with pytest.raises(TaskNotFoundError):
        await service.delete_task(task.id)
    with pytest.raises(TaskNotFoundError):
        await service.delete_task(task.id + 1000)


@pytest.mark.asyncio
async def test_restore_is_idempotent_on_active_task(service: TaskService) -> None:
    task = await service.create_task(_create(description="keep me"))

    first = await service.restore_task(task.id)
    second = await service.restore_task(task.id)

    ignore = {"updated_at_utc"}
    assert first.model_dump(exclude=ignore) == task.model_dump(exclude=ignore)
    assert second.model_dump(exclude=ignore) == task.model_dump(exclude=ignore)
    assert first.updated_at_utc is not None
    assert second.updated_at_utc >= first.updated_at_utc


@pytest.mark.asyncio
async def test_restore_of_missing_task_is_not_found(service: TaskService) -> None:
    with pytest.raises(TaskNotFoundError):
        await service.restore_task(999)


@pytest.mark.asyncio
async def test_get_task_returns_soft_deleted_and_raises_for_missing(service: TaskService) -> None:
    task = await service.create_task(_create())
    await service.delete_task(task.id)

    assert (await service.get_task(task.id)).is_deleted is True
    with pytest.raises(TaskNotFoundError):
        await service.get_task(task.id + 1)


@pytest.mark.asyncio
async def test_list_builds_page_envelope(service: TaskService) -> None:
    for i in range(3):
        await service.create_task(_create(title=f"t{i}"))

    page = await service.list_tasks(build_list_query(page=2, page_size=2))

    assert page.page == 2
    assert page.page_size == 2
    assert page.total_count == 3
    assert len(page.items) == 1


@pytest.mark.asyncio
async def test_overdue_follows_status_changes(service: TaskService) -> None:
    yesterday = date.today() - timedelta(days=2)
    task = await service.create_task(_create(due_date=yesterday.isoformat()))

    assert await _listed_ids(service, overdue=True) == [task.id]

    await service.update_task(
        task.id,
        TaskUpdateRequest(title=task.title, priority="High", status="Done", due_date=yesterday),
    )
    assert await _listed_ids(service, overdue=True) == []


@pytest.mark.asyncio
async def test_concurrent_updates_last_writer_wins(session_factory) -> None:
    async with session_factory() as db:
        task = await TaskService(db).create_task(_create())

    async with session_factory() as db_a, session_factory() as db_b:
        service_a = TaskService(db_a)
        service_b = TaskService(db_b)

        await service_a.get_task(task.id)
        await service_b.update_task(task.id, TaskUpdateRequest(title="from B", priority="Low", status="Todo"))
        await service_a.update_task(task.id, TaskUpdateRequest(title="from A", priority="High", status="Done"))

    async with session_factory() as db:
        final = await TaskService(db).get_task(task.id)

    assert final.title == "from A"
    assert final.status == "Done"
