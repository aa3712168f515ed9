from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable

import structlog

from graveyard.core.errors import InvalidTransitionError, ValidationError
from graveyard.core.models import utcnow
from graveyard.maintenance.models import (
    OPEN_STATUSES,
    CompleteTaskRequest,
    CreateTaskRequest,
    MaintenanceTask,
    SetTaskStatusRequest,
    StartTaskRequest,
    TaskCategory,
    TaskStatus,
    UpdateTaskRequest,
)
from graveyard.maintenance.sample_data import sample_tasks
from graveyard.maintenance.store import StorageReadError, TaskStore

logger = structlog.get_logger(__name__)

ChangeListener = Callable[[str, list[str]], None]

# Manual moves. Overdue is only ever entered through sweep_overdue().
START_FROM = frozenset({TaskStatus.SCHEDULED, TaskStatus.OVERDUE})
COMPLETE_FROM = frozenset({TaskStatus.SCHEDULED, TaskStatus.IN_PROGRESS, TaskStatus.OVERDUE})


@dataclass
class TaskAlerts:
    overdue: list[MaintenanceTask] = field(default_factory=list)
    upcoming: list[MaintenanceTask] = field(default_factory=list)
    mine: list[MaintenanceTask] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.overdue or self.upcoming or self.mine)


def _require_dates(scheduled_date: date, deadline: date) -> None:
    if deadline < scheduled_date:
        raise ValidationError("Deadline cannot be before scheduled date")


class MaintenanceService:
    """In-memory task collection with an optional storage mirror.

    Every mutation replaces the collection, writes it through the store and
    notifies listeners. The lock serialises request handlers against the
    sweep timer thread.
    """

    def __init__(
        self,
        store: TaskStore | None = None,
        clock: Callable[[], datetime] = utcnow,
        bootstrap: bool = True,
    ) -> None:
        self.store = store
        self._clock = clock
        self._bootstrap = bootstrap
        self._tasks: list[MaintenanceTask] = []
        self._listeners: list[ChangeListener] = []
        self._lock = threading.RLock()

    def today(self) -> date:
        return self._clock().date()

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def load(self) -> list[MaintenanceTask]:
        stored = None
        if self.store is not None:
            try:
                stored = self.store.load()
            except StorageReadError:
                logger.exception("maintenance.load_failed", key=self.store.key)
        with self._lock:
            if stored is not None:
                self._tasks = stored
                return list(self._tasks)
            tasks = sample_tasks(self._clock()) if self._bootstrap else []
            self._commit(tasks, "bootstrap", [task.id for task in tasks])
            return list(self._tasks)

    def _commit(self, tasks: list[MaintenanceTask], reason: str, task_ids: list[str]) -> None:
        self._tasks = tasks
        if self.store is not None:
            self.store.save(tasks)
        for listener in self._listeners:
            listener(reason, task_ids)

    def _apply(
        self,
        task_id: str,
        reason: str,
        change: Callable[[MaintenanceTask, datetime], MaintenanceTask],
    ) -> MaintenanceTask | None:
        with self._lock:
            for index, task in enumerate(self._tasks):
                if task.id != task_id:
                    continue
                updated = change(task, self._clock())
                tasks = list(self._tasks)
                tasks[index] = updated
                self._commit(tasks, reason, [task_id])
                logger.debug("maintenance.task_changed", task_id=task_id, reason=reason, status=updated.status.value)
                return updated
        return None

    def list_tasks(self) -> list[MaintenanceTask]:
        with self._lock:
            return list(self._tasks)

    def get_task(self, task_id: str) -> MaintenanceTask | None:
        with self._lock:
            return next((task for task in self._tasks if task.id == task_id), None)

    def create_task(self, request: CreateTaskRequest) -> MaintenanceTask:
        if not all(
            [
                request.title,
                request.description,
                request.plot_id,
                request.grave_id,
                request.scheduled_date,
                request.deadline,
            ]
        ):
            raise ValidationError("Please fill in all required fields")
        _require_dates(request.scheduled_date, request.deadline)

        now = self._clock()
        task = MaintenanceTask(
            id=uuid.uuid4().hex,
            plot_id=request.plot_id,
            grave_id=request.grave_id,
            title=request.title,
            description=request.description,
            category=request.category,
            status=TaskStatus.SCHEDULED,
            scheduled_date=request.scheduled_date,
            deadline=request.deadline,
            is_public=request.is_public,
            assigned_to=request.assigned_to,
            assigned_by=request.assigned_by,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._commit([task, *self._tasks], "create", [task.id])
        logger.debug("maintenance.task_created", task_id=task.id, grave_id=task.grave_id)
        return task

    def update_task(self, request: UpdateTaskRequest) -> MaintenanceTask | None:
        if not all([request.title, request.description, request.scheduled_date, request.deadline]):
            raise ValidationError("Please fill in all required fields")
        _require_dates(request.scheduled_date, request.deadline)
        return self._apply(
            request.task_id,
            "update",
            lambda task, now: task.touched(
                now,
                title=request.title,
                description=request.description,
                category=request.category,
                assigned_to=request.assigned_to,
                scheduled_date=request.scheduled_date,
                deadline=request.deadline,
                is_public=task.is_public if request.is_public is None else request.is_public,
            ),
        )

    def start_task(self, request: StartTaskRequest) -> MaintenanceTask | None:
        def change(task: MaintenanceTask, now: datetime) -> MaintenanceTask:
            if task.status not in START_FROM:
                raise InvalidTransitionError("Completed tasks cannot be restarted")
            return task.touched(now, status=TaskStatus.IN_PROGRESS)

        with self._lock:
            current = self.get_task(request.task_id)
            if current is not None and current.status == TaskStatus.IN_PROGRESS:
                return current
            return self._apply(request.task_id, "start", change)

    def complete_task(self, request: CompleteTaskRequest) -> MaintenanceTask | None:
        def change(task: MaintenanceTask, now: datetime) -> MaintenanceTask:
            if task.status not in COMPLETE_FROM:
                raise InvalidTransitionError("Task is already completed")
            return task.touched(
                now,
                status=TaskStatus.COMPLETED,
                completed_date=now.date(),
                completed_by=request.actor_id,
                notes=(request.notes or "").strip() or None,
            )

        return self._apply(request.task_id, "complete", change)

    def set_status(self, request: SetTaskStatusRequest) -> MaintenanceTask | None:
        return self._apply(
            request.task_id,
            "set_status",
            lambda task, now: task.touched(now, status=request.status),
        )

    def delete_task(self, task_id: str) -> bool:
        with self._lock:
            remaining = [task for task in self._tasks if task.id != task_id]
            if len(remaining) == len(self._tasks):
                return False
            self._commit(remaining, "delete", [task_id])
        logger.debug("maintenance.task_deleted", task_id=task_id)
        return True

    def sweep_overdue(self, today: date | None = None) -> list[str]:
        """Reclassify open tasks whose deadline has passed.

        Returns the ids that changed. When none did the collection is left
        as-is: nothing is persisted and listeners are not called.
        """
        with self._lock:
            today = today or self.today()
            now = self._clock()
            changed: list[str] = []
            tasks: list[MaintenanceTask] = []
            for task in self._tasks:
                if task.status in OPEN_STATUSES and task.deadline < today:
                    tasks.append(task.touched(now, status=TaskStatus.OVERDUE))
                    changed.append(task.id)
                else:
                    tasks.append(task)
            if not changed:
                return []
            self._commit(tasks, "sweep", changed)
        logger.info("maintenance.overdue_sweep", today=today.isoformat(), changed=len(changed), task_ids=changed)
        return changed

    def tasks_by_status(self, status: TaskStatus) -> list[MaintenanceTask]:
        return [task for task in self.list_tasks() if task.status == status]

    def scheduled_tasks(self) -> list[MaintenanceTask]:
        return self.tasks_by_status(TaskStatus.SCHEDULED)

    def in_progress_tasks(self) -> list[MaintenanceTask]:
        return self.tasks_by_status(TaskStatus.IN_PROGRESS)

    def completed_tasks(self) -> list[MaintenanceTask]:
        return self.tasks_by_status(TaskStatus.COMPLETED)

    def overdue_tasks(self) -> list[MaintenanceTask]:
        return self.tasks_by_status(TaskStatus.OVERDUE)

    def tasks_by_user(self, user_id: str) -> list[MaintenanceTask]:
        return [task for task in self.list_tasks() if task.assigned_to == user_id]

    def tasks_by_grave(self, grave_id: str) -> list[MaintenanceTask]:
        return [task for task in self.list_tasks() if task.grave_id == grave_id]

    def upcoming_tasks(self, days: int, today: date | None = None) -> list[MaintenanceTask]:
        limit = (today or self.today()) + timedelta(days=days)
        return [
            task
            for task in self.list_tasks()
            if task.status in OPEN_STATUSES and task.scheduled_date <= limit
        ]

    def status_counts(self) -> dict[str, int]:
        counts = {status.value: 0 for status in TaskStatus}
        for task in self.list_tasks():
            counts[task.status.value] += 1
        return counts

    def alerts(self, user_id: str | None, today: date | None = None, days: int = 3) -> TaskAlerts:
        mine = []
        if user_id:
            mine = [
                task
                for task in self.tasks_by_user(user_id)
                if task.status != TaskStatus.COMPLETED
            ]
        return TaskAlerts(
            overdue=self.overdue_tasks(),
            upcoming=self.upcoming_tasks(days, today=today),
            mine=mine,
        )

    def search_tasks(
        self,
        query: str = "",
        status: TaskStatus | None = None,
        category: TaskCategory | None = None,
        tasks: list[MaintenanceTask] | None = None,
    ) -> list[MaintenanceTask]:
        term = (query or "").strip().lower()
        rows = self.list_tasks() if tasks is None else tasks
        if term:
            rows = [
                task
                for task in rows
                if term in task.title.lower() or term in task.description.lower()
            ]
        if status is not None:
            rows = [task for task in rows if task.status == status]
        if category is not None:
            rows = [task for task in rows if task.category == category]
        return rows
