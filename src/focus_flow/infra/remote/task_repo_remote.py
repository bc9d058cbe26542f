from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError

from focus_flow.domain.errors import NotFound, PartialBatchFailure, RecordFailure, StorageUnavailable
from focus_flow.domain.task_models import Task, TaskCreate, TaskPatch, TaskPriority, apply_patch
from focus_flow.domain.task_repo import TaskRepo, require_title
from focus_flow.infra.remote.field_mapping import (
    CREATED_FIELD,
    ID_FIELD,
    RECORD_FIELDS,
    fields_to_storage,
    from_storage,
)
from focus_flow.infra.remote.record_client import RecordStoreClient

logger = logging.getLogger("focus_flow.store")

NEWEST_FIRST = [{"fieldName": CREATED_FIELD, "sorttype": "DESC"}]


def _field_list() -> List[Dict[str, Any]]:
    return [{"field": {"Name": name}} for name in RECORD_FIELDS]


def _failure(result: Dict[str, Any]) -> RecordFailure:
    field_errors = []
    for err in result.get("errors") or []:
        if isinstance(err, dict):
            label = err.get("fieldLabel") or "Field"
            field_errors.append(f"{label}: {err.get('message', '')}".strip())
        else:
            field_errors.append(f"Field: {err}")
    return RecordFailure(message=result.get("message") or "", field_errors=field_errors)


class RemoteTaskRepo(TaskRepo):
    """
    Task store on the hosted record service.
    Records carry both field spellings; see field_mapping.
    """

    backend = "remote"

    def __init__(self, client: RecordStoreClient, table: str = "task_c", fetch_limit: int = 100):
        self.client = client
        self.table = table
        self.fetch_limit = fetch_limit

    # ---------- reads ----------
    async def _fetch(self, op: str, **extra) -> List[Task]:
        params = {"fields": _field_list(), "orderBy": NEWEST_FIRST, **extra}
        resp = await self.client.fetch_records(self.table, params)
        self._require_success(op, resp)
        return [self._to_task(op, r) for r in resp.get("data") or []]

    async def get_all(self) -> List[Task]:
        return await self._fetch(
            "get_all",
            pagingInfo={"limit": self.fetch_limit, "offset": 0},
        )

    async def get_by_id(self, task_id: int) -> Task:
        resp = await self.client.get_record_by_id(self.table, task_id, {"fields": _field_list()})
        if resp is None:
            raise NotFound(task_id)
        self._require_success("get_by_id", resp)
        if not resp.get("data"):
            raise NotFound(task_id)
        return self._to_task("get_by_id", resp["data"])

    async def _fetch_by_status(self, completed: bool) -> List[Task]:
        return await self._fetch(
            "get_by_status",
            where=[{"FieldName": "completed_c", "Operator": "ExactMatch", "Values": [completed]}],
        )

    async def _fetch_by_priority(self, priority: TaskPriority) -> List[Task]:
        return await self._fetch(
            "get_by_priority",
            where=[{"FieldName": "priority_c", "Operator": "ExactMatch", "Values": [TaskPriority(priority).value]}],
        )

    async def _fetch_search(self, query: str) -> List[Task]:
        term = query.strip().lower()
        return await self._fetch(
            "search",
            whereGroups=[{
                "operator": "OR",
                "subGroups": [{
                    "conditions": [
                        {"fieldName": "title_c", "operator": "Contains", "subOperator": "", "values": [term]},
                        {"fieldName": "description_c", "operator": "Contains", "subOperator": "", "values": [term]},
                    ],
                    "operator": "OR",
                }],
            }],
        )

    # ---------- writes ----------
    async def create(self, data: TaskCreate) -> Task:
        require_title(data.title)
        record = fields_to_storage({**data.model_dump(), "completed": False, "completed_at": None})
        resp = await self.client.create_records(self.table, [record])
        return self._to_task("create", self._first_success("create", resp))

    async def update(self, task_id: int, patch: TaskPatch) -> Task:
        if "title" in patch.model_fields_set and patch.title is not None:
            require_title(patch.title)
        current = await self.get_by_id(task_id)
        merged = apply_patch(current, patch, datetime.now(timezone.utc))
        # editable fields only; CreatedOn is owned by the service
        record = {**fields_to_storage(merged.model_dump()), ID_FIELD: merged.id}
        resp = await self.client.update_records(self.table, [record])
        return self._to_task("update", self._first_success("update", resp))

    async def delete(self, task_id: int) -> bool:
        await self.get_by_id(task_id)
        resp = await self.client.delete_records(self.table, [task_id])
        self._require_success("delete", resp)
        if resp.get("results"):
            self._first_success("delete", resp)
        return True

    # ---------- envelope handling ----------
    def _to_task(self, op: str, record: Mapping[str, Any]) -> Task:
        try:
            return from_storage(record)
        except (KeyError, ValidationError) as e:
            logger.error(
                "store.bad_record",
                extra={"category": "tasks", "event": "store.bad_record", "op": op, "record": dict(record), "error": str(e)},
            )
            raise StorageUnavailable(f"Malformed task record from {op}: {e}") from e

    def _require_success(self, op: str, resp: Dict[str, Any]) -> None:
        if resp.get("success"):
            return
        message = resp.get("message") or f"Failed to {op} tasks"
        logger.error(
            "store.remote_failed",
            extra={"category": "tasks", "event": "store.remote_failed", "op": op, "error": message},
        )
        raise StorageUnavailable(message)

    def _first_success(self, op: str, resp: Dict[str, Any]) -> Dict[str, Any]:
        """Split batch results; return the first successful record's data.

        Failed records are logged with their per-field detail. Raises
        PartialBatchFailure when nothing succeeded.
        """
        self._require_success(op, resp)
        results = resp.get("results") or []
        successful = [r for r in results if r.get("success")]
        failed = [_failure(r) for r in results if not r.get("success")]

        if failed:
            logger.warning(
                "store.batch_partial",
                extra={
                    "category": "tasks",
                    "event": "store.batch_partial",
                    "op": op,
                    "failed": len(failed),
                    "succeeded": len(successful),
                    "detail": json.dumps([asdict(f) for f in failed], ensure_ascii=False),
                },
            )

        if successful:
            return successful[0].get("data") or {}
        if failed:
            raise PartialBatchFailure(op, failed)
        raise StorageUnavailable(f"No successful task {op}")

    async def aclose(self) -> None:
        await self.client.aclose()
