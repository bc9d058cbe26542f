import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from starlette.templating import Jinja2Templates

from focus_flow.app.deps import get_service
from focus_flow.domain.errors import TaskStoreError
from focus_flow.domain.task_models import FilterKey, ViewState
from focus_flow.services.task_service import TaskService

BASE_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
logger = logging.getLogger("focus_flow.system")

router = APIRouter(tags=["pages"])


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    search: str = "",
    filter: str = "all",
    edit: Optional[int] = None,
    svc: TaskService = Depends(get_service),
):
    state = ViewState(search_term=search, active_filter=filter, editing_id=edit)
    context = {"request": request, "state": state, "filters": list(FilterKey), "error": None}
    try:
        context["projection"] = await svc.project(state)
        context["stats"] = await svc.stats()
        context["editing"] = await svc.get_task(edit) if edit is not None else None
    except TaskStoreError as e:
        logger.warning(
            "page.load_failed",
            extra={"category": "http", "event": "page.load_failed", "error": e.message},
        )
        context.update(projection=None, stats=None, editing=None, error=e.user_message)
    return templates.TemplateResponse(request, "index.html", context)
