from datetime import date, datetime, timezone

import pytest

from fakes import make_task
from focus_flow.domain.task_models import Task, TaskPriority
from focus_flow.infra.remote.field_mapping import FIELD_PAIRS, fields_to_storage, from_storage, to_storage


@pytest.mark.parametrize(
    "task",
    [
        make_task(1, "plain"),
        make_task(2, "full", priority=TaskPriority.high, due=date(2024, 2, 29), description="notes"),
        make_task(3, "done", priority=TaskPriority.low, completed=True),
        Task(
            id=4,
            title="naive stamps",
            created_at=datetime(2024, 6, 1, 12, 30, 15, 123456),
            completed=True,
            completed_at=datetime(2024, 6, 2, 8, 0),
        ),
    ],
)
def test_round_trip_is_lossless(task):
    assert from_storage(to_storage(task)) == task


def test_to_storage_fills_both_spellings_with_same_value():
    record = to_storage(make_task(9, "Pay rent", priority=TaskPriority.high, due=date(2024, 3, 1)))
    for _, plain, suffixed, _ in FIELD_PAIRS:
        assert record[plain] == record[suffixed]
    assert record["Name"] == "Pay rent"
    assert record["Id"] == 9
    assert record["due_date_c"] == "2024-03-01"
    assert record["priority_c"] == "high"


def test_plain_name_wins_over_suffixed():
    record = {
        "Id": 1,
        "CreatedOn": "2024-01-01T00:00:00+00:00",
        "title": "plain title",
        "title_c": "stored title",
        "completed": False,
        "completed_c": True,
        "priority": "low",
        "priority_c": "high",
    }
    task = from_storage(record)
    assert task.title == "plain title"
    assert task.completed is False
    assert task.priority is TaskPriority.low


def test_falls_back_to_suffixed_then_defaults():
    task = from_storage({"Id": 5, "CreatedOn": "2024-01-01T00:00:00Z", "title_c": "only stored", "due_date_c": "2024-04-01"})
    assert task.title == "only stored"
    assert task.due_date == date(2024, 4, 1)
    assert task.description == ""
    assert task.completed is False
    assert task.priority is TaskPriority.medium
    assert task.completed_at is None


def test_title_falls_back_to_display_name():
    task = from_storage({"Id": 2, "CreatedOn": "2024-01-01T00:00:00Z", "Name": "From name"})
    assert task.title == "From name"


def test_unknown_priority_becomes_medium():
    task = from_storage({"Id": 3, "CreatedOn": "2024-01-01T00:00:00Z", "title": "x", "priority_c": "urgent"})
    assert task.priority is TaskPriority.medium


def test_missing_created_on_defaults_to_now():
    before = datetime.now(timezone.utc)
    task = from_storage({"Id": 4, "title": "x"})
    assert task.created_at >= before


def test_fields_to_storage_has_no_system_fields():
    record = fields_to_storage({"title": "new", "priority": TaskPriority.low})
    assert "Id" not in record and "CreatedOn" not in record
    assert record["title"] == record["title_c"] == record["Name"] == "new"
    assert record["completed"] is False and record["completed_c"] is False
    assert record["dueDate"] is None and record["due_date_c"] is None
