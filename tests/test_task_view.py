from datetime import date, datetime, timezone

from fakes import make_task
from focus_flow.domain.task_models import FilterKey, Task, TaskPriority, ViewState
from focus_flow.domain.task_view import count_by_filter, project, summarize

HIGH, MEDIUM, LOW = TaskPriority.high, TaskPriority.medium, TaskPriority.low


def ids(tasks):
    return [t.id for t in tasks]


def test_empty_collection_projects_to_zero_counts():
    result = project([], ViewState(search_term="", active_filter="all"))
    assert result.visible == []
    assert result.counts == {key: 0 for key in FilterKey}


def test_sort_incomplete_priority_due_then_completed():
    a = make_task(1, "A", priority=HIGH, due=date(2024, 1, 10))
    b = make_task(2, "B", priority=HIGH)
    c = make_task(3, "C", priority=LOW, due=date(2024, 1, 5))
    d = make_task(4, "D", priority=HIGH, completed=True)

    result = project([d, c, b, a], ViewState())
    assert ids(result.visible) == [1, 2, 3, 4]


def test_newest_first_breaks_remaining_ties():
    old = make_task(1, created=datetime(2024, 1, 1, tzinfo=timezone.utc))
    new = make_task(2, created=datetime(2024, 3, 1, tzinfo=timezone.utc))
    assert ids(project([old, new]).visible) == [2, 1]


def test_identical_keys_keep_input_order():
    tasks = [make_task(i) for i in (5, 3, 9)]
    assert ids(project(tasks).visible) == [5, 3, 9]


def test_search_is_case_insensitive_over_title_and_description():
    tasks = [
        make_task(1, "Buy MILK"),
        make_task(2, "Call mom", description="about the milkshake recipe"),
        make_task(3, "Write report"),
    ]
    result = project(tasks, ViewState(search_term="  Milk "))
    assert sorted(ids(result.visible)) == [1, 2]


def test_search_without_matches_keeps_global_counts():
    tasks = [make_task(1, "a", priority=HIGH), make_task(2, "b", completed=True)]
    result = project(tasks, ViewState(search_term="zzz"))
    assert result.visible == []
    assert result.counts[FilterKey.all] == 2
    assert result.counts[FilterKey.completed] == 1
    assert result.counts[FilterKey.high] == 1


def test_filters_apply_after_search():
    tasks = [
        make_task(1, "report draft", priority=HIGH),
        make_task(2, "report final", priority=LOW, completed=True),
        make_task(3, "groceries", priority=HIGH),
    ]
    assert ids(project(tasks, ViewState(search_term="report", active_filter="active")).visible) == [1]
    assert ids(project(tasks, ViewState(search_term="report", active_filter="completed")).visible) == [2]
    assert sorted(ids(project(tasks, ViewState(active_filter="high")).visible)) == [1, 3]
    assert ids(project(tasks, ViewState(active_filter="low")).visible) == [2]
    assert project(tasks, ViewState(active_filter="medium")).visible == []


def test_unknown_filter_behaves_as_all():
    tasks = [make_task(1), make_task(2, completed=True)]
    state = ViewState(active_filter="overdue-ish")
    assert state.active_filter is FilterKey.all
    assert len(project(tasks, state).visible) == 2


def test_counts_cover_every_key():
    tasks = [
        make_task(1, priority=HIGH),
        make_task(2, priority=HIGH, completed=True),
        make_task(3, priority=LOW),
        make_task(4),
    ]
    assert count_by_filter(tasks) == {
        FilterKey.all: 4,
        FilterKey.active: 3,
        FilterKey.completed: 1,
        FilterKey.high: 2,
        FilterKey.medium: 1,
        FilterKey.low: 1,
    }


def test_malformed_priority_sorts_and_counts_as_medium():
    odd = Task.model_construct(
        id=7,
        title="odd",
        description="",
        completed=False,
        priority="urgent",
        due_date=None,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        completed_at=None,
    )
    tasks = [make_task(1, priority=LOW), odd, make_task(2, priority=HIGH)]
    result = project(tasks)
    assert ids(result.visible) == [2, 7, 1]
    assert result.counts[FilterKey.medium] == 1


def test_project_does_not_mutate_input():
    tasks = [make_task(2, priority=LOW), make_task(1, priority=HIGH)]
    before = list(tasks)
    project(tasks, ViewState(active_filter="high"))
    assert tasks == before


def test_summarize_counts_overdue_and_rate():
    now = datetime(2024, 5, 9, 15, 0, tzinfo=timezone.utc)
    tasks = [
        make_task(1, due=date(2024, 5, 1)),
        make_task(2, due=date(2024, 5, 10)),
        make_task(3, due=date(2024, 4, 1), completed=True),
        make_task(4),
    ]
    stats = summarize(tasks, now)
    assert (stats.total, stats.completed, stats.active, stats.overdue) == (4, 1, 3, 1)
    assert stats.completion_rate == 25
    assert summarize([], now).completion_rate == 0


def test_task_is_overdue_once_its_due_date_begins():
    due_today = make_task(1, due=date(2024, 5, 10))
    assert summarize([due_today], datetime(2024, 5, 9, 23, 59, tzinfo=timezone.utc)).overdue == 0
    assert summarize([due_today], datetime(2024, 5, 10, 0, 0, tzinfo=timezone.utc)).overdue == 0
    assert summarize([due_today], datetime(2024, 5, 10, 0, 1, tzinfo=timezone.utc)).overdue == 1
    assert summarize([due_today], datetime(2024, 5, 10, 0, 1)).overdue == 1  # naive means UTC


def test_completion_rate_rounds_half_up():
    tasks = [make_task(1, completed=True)] + [make_task(i) for i in range(2, 9)]
    assert summarize(tasks, datetime(2024, 1, 1, tzinfo=timezone.utc)).completion_rate == 13
    two_thirds = [make_task(1, completed=True), make_task(2, completed=True), make_task(3)]
    assert summarize(two_thirds, datetime(2024, 1, 1, tzinfo=timezone.utc)).completion_rate == 67
