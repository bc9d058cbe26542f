from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from focus_flow.app.middleware.access_log import AccessLogMiddleware
from focus_flow.app.routes import pages, tasks
from focus_flow.config import Settings, get_settings
from focus_flow.domain.errors import NotFound, PartialBatchFailure, StorageUnavailable, TaskStoreError, ValidationFailed
from focus_flow.infra.db.kv_store import SQLiteKeyValueStore
from focus_flow.infra.db.sqlite import engine_for, make_sessionmaker
from focus_flow.infra.db.task_repo_local import LocalTaskRepo
from focus_flow.infra.remote.record_client import RecordStoreClient
from focus_flow.infra.remote.task_repo_remote import RemoteTaskRepo
from focus_flow.observability.logging import setup_logging
from focus_flow.services.task_service import TaskService

BASE_DIR = Path(__file__).resolve().parent
logger = logging.getLogger("focus_flow.system")

ERROR_STATUS = {
    NotFound: 404,
    ValidationFailed: 422,
    StorageUnavailable: 503,
    PartialBatchFailure: 502,
}


async def store_error_handler(request: Request, exc: TaskStoreError) -> JSONResponse:
    # one readable sentence out; backend detail stays in the log
    status = ERROR_STATUS.get(type(exc), 500)
    logger.warning(
        "request.store_error",
        extra={
            "category": "tasks",
            "event": "request.store_error",
            "request_id": getattr(request.state, "request_id", None),
            "error_type": type(exc).__name__,
            "error": exc.message,
            "status_code": status,
        },
    )
    return JSONResponse(status_code=status, content={"detail": exc.user_message})


async def build_repo(settings: Settings):
    """Pick the backend from settings. Returns (repo, async cleanup callable)."""
    if settings.backend == "remote":
        client = RecordStoreClient(
            settings.record_store_url,
            project_id=settings.record_store_project_id,
            public_key=settings.record_store_public_key,
            timeout_s=settings.record_store_timeout,
        )
        repo = RemoteTaskRepo(client, table=settings.record_store_table, fetch_limit=settings.fetch_limit)
        return repo, client.aclose

    engine = engine_for(settings.db_path)
    await SQLiteKeyValueStore.create_schema(engine)
    repo = LocalTaskRepo(SQLiteKeyValueStore(make_sessionmaker(engine)), key=settings.storage_key)
    await repo.load()
    return repo, engine.dispose


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)
    logger.info("system.start", extra={"category": "system", "event": "system.start", "backend": settings.backend})

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo, cleanup = await build_repo(settings)
        app.state.task_service = TaskService(repo)
        logger.info(
            "store.ready",
            extra={"category": "system", "event": "store.ready", "backend": repo.backend},
        )
        yield
        await cleanup()

    app = FastAPI(title="Focus Flow", lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(AccessLogMiddleware)
    app.add_exception_handler(TaskStoreError, store_error_handler)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    app.include_router(tasks.router)
    app.include_router(pages.router)

    @app.get("/health")
    def health():
        return {"status": "ok", "backend": settings.backend}

    return app


def run() -> None:
    import uvicorn

    uvicorn.run("focus_flow.app.main:create_app", factory=True, host="127.0.0.1", port=8000)
