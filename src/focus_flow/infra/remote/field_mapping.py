"""Canonical Task <-> record-service record mapping.

The record service keeps every task field twice: under its plain name and
under a `_c`-suffixed storage name. Reads prefer the plain value, then the
suffixed one, then a type default. Writes fill both with the same value.
Nothing outside this module sees the suffixed names.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from focus_flow.domain.task_models import Task, coerce_priority

# (canonical attr, plain record name, suffixed record name, default)
FIELD_PAIRS = (
    ("title", "title", "title_c", ""),
    ("description", "description", "description_c", ""),
    ("completed", "completed", "completed_c", False),
    ("priority", "priority", "priority_c", "medium"),
    ("due_date", "dueDate", "due_date_c", None),
    ("completed_at", "completedAt", "completed_at_c", None),
)

ID_FIELD = "Id"
NAME_FIELD = "Name"
CREATED_FIELD = "CreatedOn"

# every field a read asks the service for
RECORD_FIELDS = [ID_FIELD, NAME_FIELD, CREATED_FIELD] + [
    name for _, plain, suffixed, _ in FIELD_PAIRS for name in (plain, suffixed)
]


def _resolve(record: Mapping[str, Any], plain: str, suffixed: str, default: Any) -> Any:
    value = record.get(plain)
    if value is None:
        value = record.get(suffixed)
    return default if value is None else value


def _wire(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):  # enums
        return value.value
    return value


def fields_to_storage(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand canonical field values into both spellings, plus the Name display field."""
    record: Dict[str, Any] = {}
    for attr, plain, suffixed, default in FIELD_PAIRS:
        value = _wire(values.get(attr, default))
        if value is None:
            value = default
        record[plain] = value
        record[suffixed] = value
    record[NAME_FIELD] = record["title"]
    return record


def to_storage(task: Task) -> Dict[str, Any]:
    record = fields_to_storage(task.model_dump())
    record[ID_FIELD] = task.id
    record[CREATED_FIELD] = task.created_at.isoformat()
    return record


def from_storage(record: Mapping[str, Any]) -> Task:
    values = {
        attr: _resolve(record, plain, suffixed, default)
        for attr, plain, suffixed, default in FIELD_PAIRS
    }
    if not values["title"]:
        values["title"] = record.get(NAME_FIELD) or ""
    values["priority"] = coerce_priority(values["priority"])
    return Task(
        id=record[ID_FIELD],
        created_at=record.get(CREATED_FIELD) or datetime.now(timezone.utc),
        **values,
    )
