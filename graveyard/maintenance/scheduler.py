from __future__ import annotations

"""
Overdue sweep scheduler.

A daemon thread that sweeps once on start and then once per interval until
stopped. This is coarse polling, not a precise scheduler: a task becomes
overdue at most one interval after its deadline day ends.
"""

import threading

import structlog
from flask import Flask

from graveyard.maintenance.services import MaintenanceService

logger = structlog.get_logger(__name__)


class OverdueSweepScheduler:
    def __init__(self, app: Flask, service: MaintenanceService, interval_seconds: float = 60.0) -> None:
        self.app = app
        self.service = service
        self.interval_seconds = max(1.0, float(interval_seconds))
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> list[str]:
        with self.app.app_context():
            return self.service.sweep_overdue()

    def _loop(self) -> None:
        while True:
            try:
                self.run_once()
            except Exception:
                logger.exception("sweep_scheduler.sweep_failed")
            if self._stop_event.wait(self.interval_seconds):
                return

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="overdue-sweep", daemon=True)
        self._thread.start()
        logger.info("sweep_scheduler.started", interval_seconds=self.interval_seconds)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
            logger.info("sweep_scheduler.stopped")
