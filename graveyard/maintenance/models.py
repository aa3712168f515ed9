from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

from graveyard.core.errors import ValidationError
from graveyard.core.models import utcnow


class TaskStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"


class TaskCategory(str, Enum):
    CLEANING = "cleaning"
    LANDSCAPING = "landscaping"
    REPAIR = "repair"
    INSPECTION = "inspection"
    OTHER = "other"


OPEN_STATUSES = frozenset({TaskStatus.SCHEDULED, TaskStatus.IN_PROGRESS})


@dataclass
class MaintenanceTask:
    id: str
    plot_id: str
    grave_id: str
    title: str
    description: str
    category: TaskCategory
    status: TaskStatus
    scheduled_date: date
    deadline: date
    is_public: bool = True
    assigned_to: str | None = None
    assigned_by: str | None = None
    completed_date: date | None = None
    completed_by: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def touched(self, now: datetime, **changes: Any) -> MaintenanceTask:
        return replace(self, updated_at=now, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "plotId": self.plot_id,
            "graveId": self.grave_id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "status": self.status.value,
            "assignedTo": self.assigned_to,
            "assignedBy": self.assigned_by,
            "scheduledDate": self.scheduled_date.isoformat(),
            "deadline": self.deadline.isoformat(),
            "completedDate": self.completed_date.isoformat() if self.completed_date else None,
            "completedBy": self.completed_by,
            "notes": self.notes,
            "isPublic": self.is_public,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MaintenanceTask:
        completed_raw = data.get("completedDate")
        return cls(
            id=str(data["id"]),
            plot_id=str(data["plotId"]),
            grave_id=str(data["graveId"]),
            title=data["title"],
            description=data.get("description") or "",
            category=TaskCategory(data.get("category") or TaskCategory.OTHER.value),
            status=TaskStatus(data["status"]),
            scheduled_date=date.fromisoformat(data["scheduledDate"]),
            deadline=date.fromisoformat(data["deadline"]),
            is_public=bool(data.get("isPublic", True)),
            assigned_to=data.get("assignedTo") or None,
            assigned_by=data.get("assignedBy") or None,
            completed_date=date.fromisoformat(completed_raw) if completed_raw else None,
            completed_by=data.get("completedBy") or None,
            notes=data.get("notes") or None,
            created_at=_parse_timestamp(data["createdAt"]),
            updated_at=_parse_timestamp(data["updatedAt"]),
        )


def _parse_timestamp(value: str) -> datetime:
    # JS Date.toISOString() writes a trailing "Z".
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


def _clean(value: Any) -> str:
    return str(value if value is not None else "").strip()


def _parse_date(value: Any, field_name: str) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = _clean(value)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid date format for {field_name}") from exc


def _parse_category(value: Any) -> TaskCategory:
    raw = _clean(value).lower() or TaskCategory.CLEANING.value
    try:
        return TaskCategory(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown task category: {raw}") from exc


def _parse_flag(value: Any, default: bool | None) -> bool | None:
    if isinstance(value, bool):
        return value
    raw = _clean(value).lower()
    if not raw:
        return default
    return raw in {"1", "true", "on", "yes"}


def _optional_user(value: Any) -> str | None:
    raw = _clean(value)
    if not raw or raw == "none":
        return None
    return raw


@dataclass(frozen=True)
class CreateTaskRequest:
    plot_id: str
    grave_id: str
    title: str
    description: str
    scheduled_date: date | None
    deadline: date | None
    category: TaskCategory = TaskCategory.CLEANING
    assigned_to: str | None = None
    assigned_by: str | None = None
    is_public: bool = True

    @classmethod
    def from_payload(cls, payload: dict[str, Any], assigned_by: str | None = None) -> CreateTaskRequest:
        return cls(
            plot_id=_clean(payload.get("plotId")),
            grave_id=_clean(payload.get("graveId")),
            title=_clean(payload.get("title")),
            description=_clean(payload.get("description")),
            scheduled_date=_parse_date(payload.get("scheduledDate"), "scheduledDate"),
            deadline=_parse_date(payload.get("deadline"), "deadline"),
            category=_parse_category(payload.get("category")),
            assigned_to=_optional_user(payload.get("assignedTo")),
            assigned_by=assigned_by,
            is_public=_parse_flag(payload.get("isPublic"), True),
        )


@dataclass(frozen=True)
class UpdateTaskRequest:
    task_id: str
    title: str
    description: str
    scheduled_date: date | None
    deadline: date | None
    category: TaskCategory
    assigned_to: str | None = None
    is_public: bool | None = None

    @classmethod
    def from_payload(cls, task_id: str, payload: dict[str, Any]) -> UpdateTaskRequest:
        return cls(
            task_id=task_id,
            title=_clean(payload.get("title")),
            description=_clean(payload.get("description")),
            scheduled_date=_parse_date(payload.get("scheduledDate"), "scheduledDate"),
            deadline=_parse_date(payload.get("deadline"), "deadline"),
            category=_parse_category(payload.get("category")),
            assigned_to=_optional_user(payload.get("assignedTo")),
            is_public=_parse_flag(payload.get("isPublic"), None),
        )


@dataclass(frozen=True)
class StartTaskRequest:
    task_id: str


@dataclass(frozen=True)
class CompleteTaskRequest:
    task_id: str
    actor_id: str
    notes: str | None = None


@dataclass(frozen=True)
class SetTaskStatusRequest:
    task_id: str
    status: TaskStatus

    @classmethod
    def from_payload(cls, task_id: str, payload: dict[str, Any]) -> SetTaskStatusRequest:
        raw = _clean(payload.get("status")).lower()
        try:
            status = TaskStatus(raw)
        except ValueError as exc:
            raise ValidationError(f"Unknown task status: {raw or '-'}") from exc
        return cls(task_id=task_id, status=status)
