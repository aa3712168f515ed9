from __future__ import annotations

import json
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError

from graveyard.core.extensions import db
from graveyard.core.models import StorageEntry
from graveyard.maintenance.models import MaintenanceTask

logger = structlog.get_logger(__name__)

SCHEMA_VERSION = 1


class StorageReadError(ValueError):
    pass


def _migrate(payload: Any) -> dict[str, Any]:
    # Version 0: bare list of tasks, no envelope.
    if isinstance(payload, list):
        return {"version": SCHEMA_VERSION, "tasks": payload}
    if not isinstance(payload, dict):
        raise StorageReadError("Stored tasks must be a list or an object")
    version = payload.get("version")
    if version != SCHEMA_VERSION:
        raise StorageReadError(f"Unsupported task storage version: {version!r}")
    if not isinstance(payload.get("tasks"), list):
        raise StorageReadError("Stored task envelope has no task list")
    return payload


class TaskStore:
    """Mirrors the task collection under a single storage key."""

    def __init__(self, key: str) -> None:
        self.key = key

    def load(self) -> list[MaintenanceTask] | None:
        try:
            entry = db.session.get(StorageEntry, self.key)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageReadError(f"Task storage is unavailable: {exc}") from exc
        if entry is None or not entry.value:
            return None
        try:
            raw = json.loads(entry.value)
        except json.JSONDecodeError as exc:
            raise StorageReadError(f"Stored tasks are not valid JSON: {exc}") from exc
        payload = _migrate(raw)
        try:
            return [MaintenanceTask.from_dict(item) for item in payload["tasks"]]
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise StorageReadError(f"Stored task could not be parsed: {exc}") from exc

    def save(self, tasks: list[MaintenanceTask]) -> bool:
        body = json.dumps({"version": SCHEMA_VERSION, "tasks": [task.to_dict() for task in tasks]})
        try:
            entry = db.session.get(StorageEntry, self.key)
            if entry is None:
                db.session.add(StorageEntry(key=self.key, value=body))
            else:
                entry.value = body
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("task_store.save_failed", key=self.key)
            return False
        return True
