from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Callable, Dict, Iterable, List, Optional

from focus_flow.domain.task_models import (
    PRIORITY_RANK,
    FilterKey,
    Projection,
    Task,
    TaskPriority,
    TaskStats,
    ViewState,
    coerce_priority,
)


def _priority_is(priority: TaskPriority) -> Callable[[Task], bool]:
    return lambda t: coerce_priority(t.priority) == priority


# all keys present so counts always carry every chip
_PREDICATES: Dict[FilterKey, Callable[[Task], bool]] = {
    FilterKey.all: lambda t: True,
    FilterKey.active: lambda t: not t.completed,
    FilterKey.completed: lambda t: t.completed,
    FilterKey.high: _priority_is(TaskPriority.high),
    FilterKey.medium: _priority_is(TaskPriority.medium),
    FilterKey.low: _priority_is(TaskPriority.low),
}


def matches_search(task: Task, term: str) -> bool:
    """Case-insensitive substring match over title and description."""
    needle = term.strip().lower()
    if not needle:
        return True
    return needle in (task.title or "").lower() or needle in (task.description or "").lower()


def sort_key(task: Task):
    """Incomplete first, priority desc, due date asc (undated last), newest first."""
    rank = PRIORITY_RANK[coerce_priority(task.priority)]
    due = task.due_date
    return (
        task.completed,
        -rank,
        due is None,
        due or date.min,
        -task.created_at.timestamp(),
    )


def count_by_filter(tasks: Iterable[Task]) -> Dict[FilterKey, int]:
    tasks = list(tasks)
    return {key: sum(1 for t in tasks if pred(t)) for key, pred in _PREDICATES.items()}


def project(tasks: Iterable[Task], state: Optional[ViewState] = None) -> Projection:
    """Compute the visible task list and the filter-chip counts.

    Search runs first, then the active filter, then the multi-key sort.
    Counts always describe the full collection, not the current view.
    Pure: the input is never mutated.
    """
    state = state or ViewState()
    tasks = list(tasks)

    visible: List[Task] = [t for t in tasks if matches_search(t, state.search_term)]
    keep = _PREDICATES.get(state.active_filter, _PREDICATES[FilterKey.all])
    visible = [t for t in visible if keep(t)]
    # sorted() is stable, equal keys keep input order
    visible = sorted(visible, key=sort_key)

    return Projection(visible=visible, counts=count_by_filter(tasks))


def _due_start(due: date) -> datetime:
    # a bare due date starts at midnight UTC
    return datetime.combine(due, time.min, tzinfo=timezone.utc)


def is_overdue(task: Task, now: datetime) -> bool:
    """Open task whose due date has already begun."""
    if task.completed or task.due_date is None:
        return False
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now > _due_start(task.due_date)


def _percent(part: int, whole: int) -> int:
    # half-up, 12.5 -> 13
    return math.floor(part * 100 / whole + 0.5) if whole else 0


def summarize(tasks: Iterable[Task], now: datetime) -> TaskStats:
    tasks = list(tasks)
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    overdue = sum(1 for t in tasks if is_overdue(t, now))
    rate = _percent(completed, total)
    return TaskStats(
        total=total,
        completed=completed,
        active=total - completed,
        overdue=overdue,
        completion_rate=rate,
    )
