from __future__ import annotations

from datetime import date

from graveyard.core.models import UserRole
from graveyard.core.permissions import visible_tasks
from graveyard.maintenance.models import (
    CompleteTaskRequest,
    SetTaskStatusRequest,
    StartTaskRequest,
    TaskCategory,
    TaskStatus,
)


def test_upcoming_tasks_within_three_days(service, make_task):
    # today is 2025-06-01, so the window closes on 2025-06-04
    today_task = make_task(title="today", scheduled=date(2025, 6, 1), deadline=date(2025, 6, 9))
    edge = make_task(title="edge", scheduled=date(2025, 6, 4), deadline=date(2025, 6, 9))
    running = make_task(title="running", scheduled=date(2025, 6, 3), deadline=date(2025, 6, 9))
    service.start_task(StartTaskRequest(task_id=running.id))
    make_task(title="too far", scheduled=date(2025, 6, 5), deadline=date(2025, 6, 9))
    late = make_task(title="late", scheduled=date(2025, 5, 20), deadline=date(2025, 5, 25))
    service.sweep_overdue()
    done = make_task(title="done", scheduled=date(2025, 6, 2), deadline=date(2025, 6, 9))
    service.complete_task(CompleteTaskRequest(task_id=done.id, actor_id="2"))

    upcoming = service.upcoming_tasks(3)

    assert {task.id for task in upcoming} == {today_task.id, edge.id, running.id}
    assert late.id not in {task.id for task in upcoming}


def test_upcoming_with_explicit_today(service, make_task):
    task = make_task(scheduled=date(2025, 7, 1), deadline=date(2025, 7, 2))
    assert service.upcoming_tasks(0, today=date(2025, 6, 30)) == []
    assert service.upcoming_tasks(1, today=date(2025, 6, 30)) == [task]


def test_filters_by_status_user_and_grave(service, make_task):
    a = make_task(title="a", assigned_to="2", grave_id="1")
    b = make_task(title="b", assigned_to="3", grave_id="2")
    c = make_task(title="c", assigned_to="2", grave_id="2")
    service.start_task(StartTaskRequest(task_id=b.id))
    service.complete_task(CompleteTaskRequest(task_id=c.id, actor_id="2"))

    assert service.scheduled_tasks() == [service.get_task(a.id)]
    assert [task.id for task in service.in_progress_tasks()] == [b.id]
    assert [task.id for task in service.completed_tasks()] == [c.id]
    assert service.overdue_tasks() == []
    assert {task.id for task in service.tasks_by_user("2")} == {a.id, c.id}
    assert {task.id for task in service.tasks_by_grave("2")} == {b.id, c.id}
    assert service.tasks_by_grave("99") == []


def test_status_counts_cover_every_status(service, make_task):
    first = make_task()
    make_task()
    service.set_status(SetTaskStatusRequest(task_id=first.id, status=TaskStatus.OVERDUE))

    assert service.status_counts() == {
        "scheduled": 1,
        "in_progress": 0,
        "completed": 0,
        "overdue": 1,
    }


def test_alerts_split_overdue_upcoming_and_mine(service, make_task):
    late = make_task(title="late", scheduled=date(2025, 5, 1), deadline=date(2025, 5, 2), assigned_to="2")
    soon = make_task(title="soon", scheduled=date(2025, 6, 2), deadline=date(2025, 6, 6))
    finished = make_task(title="finished", assigned_to="2")
    service.complete_task(CompleteTaskRequest(task_id=finished.id, actor_id="2"))
    service.sweep_overdue()

    alerts = service.alerts("2")

    assert [task.id for task in alerts.overdue] == [late.id]
    assert [task.id for task in alerts.upcoming] == [soon.id]
    assert [task.id for task in alerts.mine] == [late.id]
    assert not alerts.empty
    assert service.alerts(None, today=date(2020, 1, 1)).mine == []


def test_search_tasks_by_text_status_and_category(service, make_task):
    make_task(title="Clean headstone")
    trim = make_task(title="Trim hedge")
    service.start_task(StartTaskRequest(task_id=trim.id))

    assert [task.title for task in service.search_tasks("HEDGE")] == ["Trim hedge"]
    assert [task.title for task in service.search_tasks(status=TaskStatus.SCHEDULED)] == ["Clean headstone"]
    assert service.search_tasks(category=TaskCategory.REPAIR) == []
    assert len(service.search_tasks("moss")) == 2


def test_visibility_by_role(service, make_task):
    public = make_task(title="public", is_public=True)
    private_mine = make_task(title="mine", is_public=False, assigned_to="2")
    private_other = make_task(title="other", is_public=False, assigned_to="5")
    tasks = service.list_tasks()

    assert len(visible_tasks(tasks, "1", UserRole.ADMIN)) == 3
    assert {task.id for task in visible_tasks(tasks, "2", UserRole.STAFF)} == {public.id, private_mine.id}
    assert {task.id for task in visible_tasks(tasks, "3", UserRole.VISITOR)} == {public.id}
    assert {task.id for task in visible_tasks(tasks, "5", UserRole.VISITOR)} == {public.id, private_other.id}
    assert {task.id for task in visible_tasks(tasks, "5", UserRole.STAFF)} == {public.id, private_other.id}
    assert private_other.id not in {task.id for task in visible_tasks(tasks, None, None)}
