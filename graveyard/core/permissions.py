from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING

from flask import abort
from flask_login import current_user

from graveyard.core.models import UserRole

if TYPE_CHECKING:
    from graveyard.maintenance.models import MaintenanceTask


def require_role(*roles: UserRole | str):
    allowed = {UserRole(role) for role in roles}

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            if current_user.role not in allowed:
                abort(403)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def visible_tasks(
    tasks: list[MaintenanceTask],
    user_id: str | None,
    role: UserRole | None,
) -> list[MaintenanceTask]:
    # UI-level gating only; services never filter by viewer.
    if role == UserRole.ADMIN:
        return list(tasks)
    return [task for task in tasks if task.is_public or (user_id and task.assigned_to == user_id)]
