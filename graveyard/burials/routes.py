from __future__ import annotations

from typing import Any

from flask import Blueprint, abort, jsonify, request
from flask_login import current_user, login_required

from graveyard.burials.models import (
    ApproveRecordRequest,
    CreateBurialRecordRequest,
    RejectRecordRequest,
    UpdateBurialRecordRequest,
)
from graveyard.core.models import GraveStatus, UserRole
from graveyard.core.permissions import require_role
from graveyard.core.services import burial_service, grave_inventory

burials_bp = Blueprint("burials", __name__, url_prefix="/burials")


def _payload() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _error(exc: ValueError):
    return jsonify({"error": str(exc)}), 400


@burials_bp.get("/plots")
@login_required
def list_plots():
    return jsonify(
        {
            "plots": [
                {"id": str(plot.id), "name": plot.name, "section": plot.section, "totalGraves": plot.total_graves}
                for plot in grave_inventory().plots()
            ]
        }
    )


@burials_bp.get("/plots/<int:plot_id>/graves")
@login_required
def plot_graves(plot_id: int):
    available_only = request.args.get("available", "").lower() in {"1", "true", "yes"}
    graves = grave_inventory().graves_for_plot(plot_id, available_only=available_only)
    return jsonify(
        {
            "graves": [
                {"id": str(grave.id), "label": grave.label, "status": grave.status.value}
                for grave in graves
            ]
        }
    )


@burials_bp.get("/records")
@login_required
@require_role(UserRole.ADMIN, UserRole.STAFF)
def list_records():
    records = burial_service().list_records()
    return jsonify({"records": [record.to_dict() for record in records], "total": len(records)})


@burials_bp.post("/records")
@login_required
@require_role(UserRole.ADMIN, UserRole.STAFF)
def create_record():
    inventory = grave_inventory()
    try:
        payload = CreateBurialRecordRequest.from_payload(_payload())
        grave = inventory.grave(int(payload.grave_id)) if payload.grave_id.isdigit() else None
        if payload.grave_id and grave is None:
            raise ValueError("Grave not found")
        if grave is not None and grave.status != GraveStatus.AVAILABLE:
            raise ValueError("Grave is not available")
        record = burial_service().create_record(payload)
    except ValueError as exc:
        return _error(exc)
    inventory.reserve(grave.id, record.name)
    return jsonify(record.to_dict()), 201


@burials_bp.get("/records/<record_id>")
@login_required
@require_role(UserRole.ADMIN, UserRole.STAFF)
def record_detail(record_id: str):
    record = burial_service().get_record(record_id)
    if record is None:
        abort(404)
    return jsonify(record.to_dict())


@burials_bp.post("/records/<record_id>")
@login_required
@require_role(UserRole.ADMIN, UserRole.STAFF)
def edit_record(record_id: str):
    try:
        record = burial_service().update_record(UpdateBurialRecordRequest.from_payload(record_id, _payload()))
    except ValueError as exc:
        return _error(exc)
    if record is None:
        abort(404)
    return jsonify(record.to_dict())


@burials_bp.post("/records/<record_id>/delete")
@login_required
@require_role(UserRole.ADMIN)
def delete_record(record_id: str):
    if not burial_service().delete_record(record_id):
        abort(404)
    return jsonify({"deleted": record_id})


@burials_bp.post("/records/<record_id>/approve")
@login_required
@require_role(UserRole.ADMIN)
def approve_record(record_id: str):
    try:
        record = burial_service().approve_record(
            ApproveRecordRequest(record_id=record_id, approved_by=str(current_user.id))
        )
    except ValueError as exc:
        return _error(exc)
    if record is None:
        abort(404)
    return jsonify(record.to_dict())


@burials_bp.post("/records/<record_id>/reject")
@login_required
@require_role(UserRole.ADMIN)
def reject_record(record_id: str):
    reason = str(_payload().get("notes") or "").strip()
    try:
        record = burial_service().reject_record(RejectRecordRequest(record_id=record_id, reason=reason))
    except ValueError as exc:
        return _error(exc)
    if record is None:
        abort(404)
    return jsonify(record.to_dict())


@burials_bp.get("/graves/<grave_id>/record")
@login_required
def grave_record(grave_id: str):
    record = burial_service().record_for_grave(grave_id)
    if record is None:
        abort(404)
    return jsonify(record.to_dict())
