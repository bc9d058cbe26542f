import logging
from datetime import datetime, timezone
from typing import List, Optional

from focus_flow.domain.errors import ValidationFailed
from focus_flow.domain.task_models import Projection, Task, TaskCreate, TaskPatch, TaskPriority, TaskStats, ViewState
from focus_flow.domain.task_repo import TaskRepo
from focus_flow.domain import task_view

logger = logging.getLogger("focus_flow.tasks")


class TaskService:
    def __init__(self, repo: TaskRepo):
        self.repo = repo

    async def create_task(self, data: TaskCreate) -> Task:
        title = (data.title or "").strip()
        if not title:
            raise ValidationFailed("title must not be empty")
        data = data.model_copy(update={"title": title, "description": (data.description or "").strip()})
        task = await self.repo.create(data)
        logger.info("task.create", extra={"category": "tasks", "event": "task.create", "task_id": task.id, "title": task.title})
        return task

    async def update_task(self, task_id: int, patch: TaskPatch) -> Task:
        changes = {}
        if patch.title is not None:
            changes["title"] = patch.title.strip()
            if not changes["title"]:
                raise ValidationFailed("title must not be empty")
        if patch.description is not None:
            changes["description"] = patch.description.strip()
        if changes:
            patch = patch.model_copy(update=changes)
        task = await self.repo.update(task_id, patch)
        logger.info(
            "task.update",
            extra={"category": "tasks", "event": "task.update", "task_id": task_id, "fields": sorted(patch.model_fields_set)},
        )
        return task

    async def toggle_complete(self, task_id: int) -> Task:
        current = await self.repo.get_by_id(task_id)
        task = await self.repo.update(task_id, TaskPatch(completed=not current.completed))
        logger.info(
            "task.toggle",
            extra={"category": "tasks", "event": "task.toggle", "task_id": task_id, "completed": task.completed},
        )
        return task

    async def delete_task(self, task_id: int) -> bool:
        deleted = await self.repo.delete(task_id)
        logger.info("task.delete", extra={"category": "tasks", "event": "task.delete", "task_id": task_id})
        return deleted

    async def get_task(self, task_id: int) -> Task:
        return await self.repo.get_by_id(task_id)

    async def list_tasks(self) -> List[Task]:
        return await self.repo.get_all()

    async def tasks_by_status(self, completed: bool) -> List[Task]:
        return await self.repo.get_by_status(completed)

    async def tasks_by_priority(self, priority: TaskPriority) -> List[Task]:
        return await self.repo.get_by_priority(priority)

    async def search_tasks(self, query: str) -> List[Task]:
        return await self.repo.search(query)

    async def project(self, state: Optional[ViewState] = None) -> Projection:
        return task_view.project(await self.repo.get_all(), state or ViewState())

    async def stats(self, now: Optional[datetime] = None) -> TaskStats:
        now = now or datetime.now(timezone.utc)
        return task_view.summarize(await self.repo.get_all(), now)
