from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from enum import Enum
from datetime import date, datetime
from typing import Dict, List, Optional


class TaskPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


# sort weight: higher sorts first
PRIORITY_RANK = {TaskPriority.high: 3, TaskPriority.medium: 2, TaskPriority.low: 1}


def coerce_priority(value) -> TaskPriority:
    """Map anything that is not a known priority to medium."""
    try:
        return TaskPriority(value)
    except ValueError:
        return TaskPriority.medium


class FilterKey(str, Enum):
    all = "all"
    active = "active"
    completed = "completed"
    high = "high"
    medium = "medium"
    low = "low"


class TaskCreate(BaseModel):
    title: str
    description: str = ""
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[date] = None

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, v):
        return "" if v is None else v


class TaskPatch(BaseModel):
    """Partial edit. Keys outside the editable set (id, created_at, ...) are dropped."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    completed: Optional[bool] = None


class Task(BaseModel):
    id: int = Field(gt=0)
    title: str
    description: str = ""
    completed: bool = False
    priority: TaskPriority = TaskPriority.medium
    due_date: Optional[date] = None
    created_at: datetime
    completed_at: Optional[datetime] = None


class ViewState(BaseModel):
    """UI state a projection is computed from. Immutable; build a new one per change."""

    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    active_filter: FilterKey = FilterKey.all
    editing_id: Optional[int] = None

    @field_validator("active_filter", mode="before")
    @classmethod
    def _unknown_filter_is_all(cls, v):
        if isinstance(v, FilterKey):
            return v
        try:
            return FilterKey(v)
        except ValueError:
            return FilterKey.all

    @field_validator("search_term", mode="before")
    @classmethod
    def _none_search(cls, v):
        return "" if v is None else v


class Projection(BaseModel):
    visible: List[Task]
    counts: Dict[FilterKey, int]


class TaskStats(BaseModel):
    total: int
    completed: int
    active: int
    overdue: int
    completion_rate: int


def apply_patch(task: Task, patch: TaskPatch, now: datetime) -> Task:
    """Merge the explicitly-set fields of `patch` onto `task`.

    Keeps `completed_at` paired with `completed`: a false->true transition
    stamps `now`, a true->false transition clears it.
    """
    changes = patch.model_dump(exclude_unset=True)
    if changes.get("priority") is None:
        changes.pop("priority", None)
    if changes.get("title") is None:
        changes.pop("title", None)
    if changes.get("completed") is None:
        changes.pop("completed", None)
    if "description" in changes and changes["description"] is None:
        changes["description"] = ""

    completed = changes.get("completed", task.completed)
    if completed and (not task.completed or task.completed_at is None):
        changes["completed_at"] = now
    elif not completed:
        changes["completed_at"] = None
    return task.model_copy(update=changes)
