from __future__ import annotations

from enum import Enum
from typing import Any, TypeVar

from flask import Blueprint, abort, jsonify, request
from flask_login import current_user, login_required

from graveyard.core.models import UserRole
from graveyard.core.permissions import require_role, visible_tasks
from graveyard.core.services import maintenance_service
from graveyard.maintenance.models import (
    CompleteTaskRequest,
    CreateTaskRequest,
    MaintenanceTask,
    SetTaskStatusRequest,
    StartTaskRequest,
    TaskCategory,
    TaskStatus,
    UpdateTaskRequest,
)

maintenance_bp = Blueprint("maintenance", __name__, url_prefix="/maintenance")

E = TypeVar("E", bound=Enum)


def _payload() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _actor_id() -> str:
    return str(current_user.id)


def _enum_filter(enum_cls: type[E], raw: str | None) -> E | None:
    value = (raw or "").strip().lower()
    if not value or value == "all":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        abort(400)


def _visible(tasks: list[MaintenanceTask]) -> list[MaintenanceTask]:
    return visible_tasks(tasks, _actor_id(), current_user.role)


def _task_or_404(task: MaintenanceTask | None) -> MaintenanceTask:
    if task is None or not _visible([task]):
        abort(404)
    return task


def _error(exc: ValueError):
    return jsonify({"error": str(exc)}), 400


@maintenance_bp.get("/tasks")
@login_required
def list_tasks():
    service = maintenance_service()
    rows = service.search_tasks(
        request.args.get("q", ""),
        status=_enum_filter(TaskStatus, request.args.get("status")),
        category=_enum_filter(TaskCategory, request.args.get("category")),
        tasks=_visible(service.list_tasks()),
    )
    return jsonify({"tasks": [task.to_dict() for task in rows], "total": len(rows)})


@maintenance_bp.post("/tasks")
@login_required
@require_role(UserRole.ADMIN)
def create_task():
    try:
        task = maintenance_service().create_task(
            CreateTaskRequest.from_payload(_payload(), assigned_by=_actor_id())
        )
    except ValueError as exc:
        return _error(exc)
    return jsonify(task.to_dict()), 201


@maintenance_bp.get("/tasks/<task_id>")
@login_required
def task_detail(task_id: str):
    task = _task_or_404(maintenance_service().get_task(task_id))
    return jsonify(task.to_dict())


@maintenance_bp.post("/tasks/<task_id>")
@login_required
@require_role(UserRole.ADMIN)
def edit_task(task_id: str):
    try:
        task = maintenance_service().update_task(UpdateTaskRequest.from_payload(task_id, _payload()))
    except ValueError as exc:
        return _error(exc)
    if task is None:
        abort(404)
    return jsonify(task.to_dict())


@maintenance_bp.post("/tasks/<task_id>/delete")
@login_required
@require_role(UserRole.ADMIN)
def delete_task(task_id: str):
    if not maintenance_service().delete_task(task_id):
        abort(404)
    return jsonify({"deleted": task_id})


@maintenance_bp.post("/tasks/<task_id>/start")
@login_required
@require_role(UserRole.ADMIN, UserRole.STAFF)
def start_task(task_id: str):
    _task_or_404(maintenance_service().get_task(task_id))
    try:
        task = maintenance_service().start_task(StartTaskRequest(task_id=task_id))
    except ValueError as exc:
        return _error(exc)
    return jsonify(_task_or_404(task).to_dict())


@maintenance_bp.post("/tasks/<task_id>/complete")
@login_required
@require_role(UserRole.ADMIN, UserRole.STAFF)
def complete_task(task_id: str):
    _task_or_404(maintenance_service().get_task(task_id))
    notes = _payload().get("notes")
    try:
        task = maintenance_service().complete_task(
            CompleteTaskRequest(task_id=task_id, actor_id=_actor_id(), notes=notes)
        )
    except ValueError as exc:
        return _error(exc)
    return jsonify(_task_or_404(task).to_dict())


@maintenance_bp.post("/tasks/<task_id>/status")
@login_required
@require_role(UserRole.ADMIN)
def set_task_status(task_id: str):
    try:
        task = maintenance_service().set_status(SetTaskStatusRequest.from_payload(task_id, _payload()))
    except ValueError as exc:
        return _error(exc)
    if task is None:
        abort(404)
    return jsonify(task.to_dict())


@maintenance_bp.get("/graves/<grave_id>/tasks")
@login_required
def grave_tasks(grave_id: str):
    rows = _visible(maintenance_service().tasks_by_grave(grave_id))
    return jsonify({"tasks": [task.to_dict() for task in rows]})


@maintenance_bp.get("/alerts")
@login_required
def alerts():
    days = request.args.get("days", default=3, type=int)
    data = maintenance_service().alerts(_actor_id(), days=max(0, days))
    return jsonify(
        {
            "overdue": [task.to_dict() for task in _visible(data.overdue)],
            "upcoming": [task.to_dict() for task in _visible(data.upcoming)],
            "mine": [task.to_dict() for task in data.mine],
        }
    )


@maintenance_bp.get("/stats")
@login_required
@require_role(UserRole.ADMIN, UserRole.STAFF)
def stats():
    return jsonify(maintenance_service().status_counts())
