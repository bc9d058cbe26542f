from fastapi import Request

from focus_flow.services.task_service import TaskService


def get_service(request: Request) -> TaskService:
    # set in main.lifespan (or directly by tests)
    svc = getattr(request.app.state, "task_service", None)
    if svc is None:
        raise RuntimeError("TaskService not wired")
    return svc
