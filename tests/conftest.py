"""Shared fixtures: fake storage backends, repos and an ASGI test client."""

import logging
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from fakes import FakeKeyValueStore, FakeRecordService
from focus_flow.config import Settings
from focus_flow.infra.db.task_repo_local import LocalTaskRepo
from focus_flow.infra.remote.record_client import RecordStoreClient
from focus_flow.infra.remote.task_repo_remote import RemoteTaskRepo
from focus_flow.services.task_service import TaskService


@pytest.fixture
def kv() -> FakeKeyValueStore:
    """Empty local storage; an empty snapshot list means "no tasks" (not the seed)."""
    return FakeKeyValueStore({"tasks": "[]"})


@pytest_asyncio.fixture
async def local_repo(kv: FakeKeyValueStore) -> LocalTaskRepo:
    repo = LocalTaskRepo(kv, key="tasks")
    await repo.load()
    return repo


@pytest.fixture
def record_service() -> FakeRecordService:
    return FakeRecordService()


@pytest_asyncio.fixture
async def remote_repo(record_service: FakeRecordService) -> AsyncGenerator[RemoteTaskRepo, None]:
    client = RecordStoreClient(
        "http://records.test",
        project_id="proj-1",
        public_key="pk-test",
        transport=record_service.transport(),
    )
    repo = RemoteTaskRepo(client, table="task_c", fetch_limit=100)
    yield repo
    await repo.aclose()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(db_path=tmp_path / "focus_flow.db", log_dir=tmp_path / "logs", log_level="WARNING")


@pytest.fixture
def make_app(settings: Settings):
    """Build the app around a given repo; the lifespan is skipped.

    create_app() reconfigures root logging, so the existing handlers are
    put back afterwards.
    """
    from focus_flow.app.main import create_app

    root = logging.getLogger()
    saved = (root.level, list(root.handlers))

    def _make(repo):
        app = create_app(settings)
        app.state.task_service = TaskService(repo)
        return app

    yield _make

    for handler in root.handlers:
        if handler not in saved[1]:
            handler.close()
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]


@pytest_asyncio.fixture
async def client(make_app, local_repo: LocalTaskRepo) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=make_app(local_repo)), base_url="http://test") as ac:
        yield ac
