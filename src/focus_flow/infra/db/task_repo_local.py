from __future__ import annotations
import json
import logging
from typing import List, Optional
from datetime import datetime, timedelta, timezone

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from focus_flow.domain.errors import NotFound, StorageUnavailable
from focus_flow.domain.task_models import Task, TaskCreate, TaskPatch, TaskPriority, apply_patch
from focus_flow.domain.task_repo import TaskRepo, require_title
from focus_flow.infra.db.kv_store import KeyValueStore

logger = logging.getLogger("focus_flow.store")

_snapshot = TypeAdapter(List[Task])


def seed_tasks(now: Optional[datetime] = None) -> List[Task]:
    """Starter collection used when local storage is empty or unreadable."""
    now = now or datetime.now(timezone.utc)
    today = now.date()
    return [
        Task(
            id=1,
            title="Plan the week",
            description="Block out focus time and list the three must-do items.",
            priority=TaskPriority.high,
            due_date=today + timedelta(days=1),
            created_at=now - timedelta(days=3),
        ),
        Task(
            id=2,
            title="Reply to pending emails",
            description="",
            priority=TaskPriority.medium,
            due_date=today,
            created_at=now - timedelta(days=2),
        ),
        Task(
            id=3,
            title="Water the plants",
            description="Balcony and kitchen.",
            completed=True,
            priority=TaskPriority.low,
            created_at=now - timedelta(days=1),
            completed_at=now - timedelta(hours=5),
        ),
    ]


class LocalTaskRepo(TaskRepo):
    """
    In-memory task list mirrored to a key/value store under one key.
    Every mutation writes the whole snapshot before returning, so a
    fresh `load()` rebuilds the same state.
    """

    backend = "local"

    def __init__(self, kv: KeyValueStore, key: str = "tasks"):
        self.kv = kv
        self.key = key
        self._tasks: Optional[List[Task]] = None

    async def load(self) -> List[Task]:
        try:
            raw = await self.kv.get(self.key)
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"local storage unreadable: {e}") from e

        tasks = self._decode(raw)
        self._tasks = tasks
        logger.info(
            "store.loaded",
            extra={"category": "tasks", "event": "store.loaded", "backend": self.backend, "count": len(tasks)},
        )
        return list(tasks)

    def _decode(self, raw: Optional[str]) -> List[Task]:
        if raw is None:
            return seed_tasks()
        try:
            return _snapshot.validate_python(json.loads(raw))
        except (ValueError, ValidationError) as e:
            logger.warning(
                "store.snapshot_corrupt",
                extra={"category": "tasks", "event": "store.snapshot_corrupt", "key": self.key, "error": str(e)},
            )
            return seed_tasks()

    def _require_loaded(self) -> List[Task]:
        if self._tasks is None:
            raise StorageUnavailable("local store not loaded")
        return self._tasks

    async def _persist(self, tasks: List[Task]) -> None:
        payload = _snapshot.dump_json(tasks).decode("utf-8")
        try:
            await self.kv.set(self.key, payload)
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"local storage write failed: {e}") from e
        self._tasks = tasks

    def _index_of(self, tasks: List[Task], task_id: int) -> int:
        for i, t in enumerate(tasks):
            if t.id == task_id:
                return i
        raise NotFound(task_id)

    async def get_all(self) -> List[Task]:
        # newest first; id breaks same-instant ties
        return sorted(self._require_loaded(), key=lambda t: (t.created_at, t.id), reverse=True)

    async def get_by_id(self, task_id: int) -> Task:
        tasks = self._require_loaded()
        return tasks[self._index_of(tasks, task_id)]

    async def create(self, data: TaskCreate) -> Task:
        require_title(data.title)
        tasks = self._require_loaded()
        task = Task(
            id=max((t.id for t in tasks), default=0) + 1,
            title=data.title,
            description=data.description,
            priority=data.priority,
            due_date=data.due_date,
            completed=False,
            created_at=datetime.now(timezone.utc),
            completed_at=None,
        )
        await self._persist([*tasks, task])
        return task

    async def update(self, task_id: int, patch: TaskPatch) -> Task:
        tasks = self._require_loaded()
        i = self._index_of(tasks, task_id)
        if "title" in patch.model_fields_set and patch.title is not None:
            require_title(patch.title)
        updated = apply_patch(tasks[i], patch, datetime.now(timezone.utc))
        await self._persist([*tasks[:i], updated, *tasks[i + 1:]])
        return updated

    async def delete(self, task_id: int) -> bool:
        tasks = self._require_loaded()
        i = self._index_of(tasks, task_id)
        await self._persist([*tasks[:i], *tasks[i + 1:]])
        return True
