from __future__ import annotations

import os


def _env_flag(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///graveyard.db",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Coarse polling: one sweep on start, then one per interval.
    OVERDUE_SWEEP_ENABLED = _env_flag("OVERDUE_SWEEP_ENABLED", True)
    OVERDUE_SWEEP_INTERVAL_SECONDS = float(os.getenv("OVERDUE_SWEEP_INTERVAL", "60"))

    AUTOSTART_SERVICES = True
    TASKS_STORAGE_KEY = "graveyard_maintenance"
    BOOTSTRAP_SAMPLE_TASKS = True

    # "override" lets approve/reject be re-applied, "final" locks the first decision.
    BURIAL_DECISION_POLICY = os.getenv("BURIAL_DECISION_POLICY", "override").strip().lower()
