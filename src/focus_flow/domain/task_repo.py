from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List

from focus_flow.domain.errors import TaskStoreError, ValidationFailed
from focus_flow.domain.task_models import Task, TaskCreate, TaskPatch, TaskPriority, coerce_priority
from focus_flow.domain.task_view import matches_search

logger = logging.getLogger("focus_flow.store")


def require_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise ValidationFailed("title must not be empty")
    return title


class TaskRepo(ABC):
    """
    CRUD contract shared by the local and remote backends.

    CRUD failures propagate. The three query helpers log backend
    failures and return an empty list instead.
    """

    backend = "abstract"

    @abstractmethod
    async def get_all(self) -> List[Task]:
        """All tasks, newest first."""

    @abstractmethod
    async def get_by_id(self, task_id: int) -> Task: ...

    @abstractmethod
    async def create(self, data: TaskCreate) -> Task: ...

    @abstractmethod
    async def update(self, task_id: int, patch: TaskPatch) -> Task: ...

    @abstractmethod
    async def delete(self, task_id: int) -> bool: ...

    async def get_by_status(self, completed: bool) -> List[Task]:
        return await self._quietly("get_by_status", lambda: self._fetch_by_status(completed))

    async def get_by_priority(self, priority: TaskPriority) -> List[Task]:
        return await self._quietly("get_by_priority", lambda: self._fetch_by_priority(priority))

    async def search(self, query: str) -> List[Task]:
        return await self._quietly("search", lambda: self._fetch_search(query))

    # Backends with server-side filtering override these.

    async def _fetch_by_status(self, completed: bool) -> List[Task]:
        return [t for t in await self.get_all() if t.completed == completed]

    async def _fetch_by_priority(self, priority: TaskPriority) -> List[Task]:
        return [t for t in await self.get_all() if coerce_priority(t.priority) == priority]

    async def _fetch_search(self, query: str) -> List[Task]:
        return [t for t in await self.get_all() if matches_search(t, query)]

    async def _quietly(self, op: str, fetch: Callable[[], Awaitable[List[Task]]]) -> List[Task]:
        try:
            return await fetch()
        except TaskStoreError as e:
            logger.warning(
                "store.query_failed",
                extra={
                    "category": "tasks",
                    "event": "store.query_failed",
                    "backend": self.backend,
                    "op": op,
                    "error": e.message,
                },
            )
            return []
