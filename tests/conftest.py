# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from labflow.db import get_db, init_db
from labflow.db.session import build_engine
from labflow.features.tasks.repository import TaskRepository
from labflow.features.tasks.service import TaskService
from labflow.main import app


@pytest_asyncio.fixture()
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """
    Fresh SQLite database per test.

    A file database (rather than :memory:) lets every session in a test see
    the same data, exactly like separate requests would.
    """
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasks.sqlite3'}")
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as db:
        yield db


@pytest.fixture()
def repo(session: AsyncSession) -> TaskRepository:
    return TaskRepository(session)


@pytest.fixture()
def service(session: AsyncSession) -> TaskService:
    return TaskService(session)


@pytest_asyncio.fixture()
async def client(session_factory) -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client against the real app, with get_db pointed at the test database."""

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()


def make_row(**overrides) -> dict:
    """Column values for TaskRepository.create_task with sensible defaults."""
    values = {
        "title": "Task",
        "description": None,
        "priority": "Medium",
        "status": "Todo",
        "due_date": None,
        "created_at_utc": datetime(2025, 1, 1, 12, 0, 0),
        "updated_at_utc": None,
        "is_deleted": False,
    }
    values.update(overrides)
    return values
