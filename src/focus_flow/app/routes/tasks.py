from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from focus_flow.app.deps import get_service
from focus_flow.domain.task_models import (
    Projection,
    Task,
    TaskCreate,
    TaskPatch,
    TaskPriority,
    TaskStats,
    ViewState,
)
from focus_flow.services.task_service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


class DeleteResult(BaseModel):
    deleted: bool


@router.get("", response_model=Projection)
async def list_tasks(
    search: str = "",
    filter: str = "all",
    svc: TaskService = Depends(get_service),
):
    return await svc.project(ViewState(search_term=search, active_filter=filter))


@router.post("", response_model=Task, status_code=201)
async def create_task(payload: TaskCreate, svc: TaskService = Depends(get_service)):
    return await svc.create_task(payload)


# fixed paths before /{task_id}
@router.get("/stats", response_model=TaskStats)
async def task_stats(svc: TaskService = Depends(get_service)):
    return await svc.stats()


@router.get("/search", response_model=list[Task])
async def search_tasks(q: str = Query(default=""), svc: TaskService = Depends(get_service)):
    return await svc.search_tasks(q)


@router.get("/status/{completed}", response_model=list[Task])
async def tasks_by_status(completed: bool, svc: TaskService = Depends(get_service)):
    return await svc.tasks_by_status(completed)


@router.get("/priority/{priority}", response_model=list[Task])
async def tasks_by_priority(priority: TaskPriority, svc: TaskService = Depends(get_service)):
    return await svc.tasks_by_priority(priority)


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: int, svc: TaskService = Depends(get_service)):
    return await svc.get_task(task_id)


@router.patch("/{task_id}", response_model=Task)
async def update_task(task_id: int, patch: TaskPatch, svc: TaskService = Depends(get_service)):
    return await svc.update_task(task_id, patch)


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(task_id: int, svc: TaskService = Depends(get_service)):
    return await svc.toggle_complete(task_id)


@router.delete("/{task_id}", response_model=DeleteResult)
async def delete_task(task_id: int, svc: TaskService = Depends(get_service)):
    return DeleteResult(deleted=await svc.delete_task(task_id))
