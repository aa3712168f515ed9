from __future__ import annotations

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from graveyard import create_app
from graveyard.core.config import Config
from graveyard.core.extensions import db
from graveyard.core.models import seed_demo_data
from graveyard.core.services import shutdown_services, start_services
from graveyard.maintenance.models import CreateTaskRequest, TaskCategory
from graveyard.maintenance.services import MaintenanceService


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret"
    AUTOSTART_SERVICES = False
    OVERDUE_SWEEP_ENABLED = False
    BURIAL_DECISION_POLICY = "override"


class FrozenClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        seed_demo_data(db.session)
        start_services(app)
        yield app
        shutdown_services(app)
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _login_as(client, email: str, password: str):
    def _login():
        return client.post("/auth/login", data={"email": email, "password": password})

    return _login


@pytest.fixture
def login_admin(client):
    return _login_as(client, "admin@graveyard.local", "admin123")


@pytest.fixture
def login_staff(client):
    return _login_as(client, "staff@graveyard.local", "staff123")


@pytest.fixture
def login_visitor(client):
    return _login_as(client, "visitor@graveyard.local", "visitor123")


@pytest.fixture
def clock():
    return FrozenClock(datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def service(clock):
    return MaintenanceService(store=None, clock=clock, bootstrap=False)


@pytest.fixture
def make_task(service):
    def _make(
        scheduled: date = date(2025, 6, 2),
        deadline: date = date(2025, 6, 5),
        title: str = "Clean headstone",
        grave_id: str = "1",
        assigned_to: str | None = None,
        is_public: bool = True,
    ):
        return service.create_task(
            CreateTaskRequest(
                plot_id="1",
                grave_id=grave_id,
                title=title,
                description="Remove moss and wash the stone",
                scheduled_date=scheduled,
                deadline=deadline,
                category=TaskCategory.CLEANING,
                assigned_to=assigned_to,
                assigned_by="1",
                is_public=is_public,
            )
        )

    return _make
