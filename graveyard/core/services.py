from __future__ import annotations

import atexit
from dataclasses import dataclass

from flask import Flask, current_app

from graveyard.burials.services import BurialRecordService, DecisionPolicy
from graveyard.core.inventory import GraveInventory
from graveyard.maintenance.scheduler import OverdueSweepScheduler
from graveyard.maintenance.services import MaintenanceService
from graveyard.maintenance.store import TaskStore

EXTENSION_KEY = "graveyard"


@dataclass
class Services:
    maintenance: MaintenanceService
    burials: BurialRecordService
    inventory: GraveInventory
    scheduler: OverdueSweepScheduler


def init_services(app: Flask) -> Services:
    maintenance = MaintenanceService(
        store=TaskStore(app.config["TASKS_STORAGE_KEY"]),
        bootstrap=app.config.get("BOOTSTRAP_SAMPLE_TASKS", True),
    )
    services = Services(
        maintenance=maintenance,
        burials=BurialRecordService(policy=DecisionPolicy(app.config["BURIAL_DECISION_POLICY"])),
        inventory=GraveInventory(),
        scheduler=OverdueSweepScheduler(
            app,
            maintenance,
            interval_seconds=app.config["OVERDUE_SWEEP_INTERVAL_SECONDS"],
        ),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def start_services(app: Flask) -> None:
    services = app.extensions[EXTENSION_KEY]
    with app.app_context():
        services.maintenance.load()
    if app.config.get("OVERDUE_SWEEP_ENABLED"):
        services.scheduler.start()
        atexit.register(shutdown_services, app)
    else:
        services.scheduler.run_once()


def shutdown_services(app: Flask) -> None:
    services = app.extensions.get(EXTENSION_KEY)
    if services is not None:
        services.scheduler.stop()


def _services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


def maintenance_service() -> MaintenanceService:
    return _services().maintenance


def burial_service() -> BurialRecordService:
    return _services().burials


def grave_inventory() -> GraveInventory:
    return _services().inventory


def sweep_scheduler() -> OverdueSweepScheduler:
    return _services().scheduler
