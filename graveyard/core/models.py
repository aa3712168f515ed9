from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from flask_login import UserMixin
from sqlalchemy import Enum as SAEnum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import generate_password_hash

from graveyard.core.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    VISITOR = "visitor"


class GraveStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    UNAVAILABLE = "unavailable"


class User(UserMixin, db.Model):
    __tablename__ = "user_account"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="user_role"),
        nullable=False,
        default=UserRole.VISITOR,
    )
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)


class Plot(db.Model):
    # Subdivision of the burial ground; owns one or more graves.
    __tablename__ = "plot"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(db.String(60), unique=True, nullable=False)
    section: Mapped[str] = mapped_column(db.String(60), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    graves = relationship("Grave", back_populates="plot", cascade="all, delete-orphan")

    @property
    def total_graves(self) -> int:
        return len(self.graves)


class Grave(db.Model):
    __tablename__ = "grave"
    __table_args__ = (UniqueConstraint("plot_id", "number", name="uq_grave_plot_number"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    plot_id: Mapped[int] = mapped_column(ForeignKey("plot.id"), nullable=False, index=True)
    number: Mapped[int] = mapped_column(nullable=False)
    status: Mapped[GraveStatus] = mapped_column(
        SAEnum(GraveStatus, name="grave_status"),
        nullable=False,
        default=GraveStatus.AVAILABLE,
    )
    reserved_by: Mapped[str] = mapped_column(db.String(120), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    plot = relationship("Plot", back_populates="graves")

    @validates("number")
    def _validate_number(self, _key: str, value: int) -> int:
        if value is None or int(value) < 1:
            raise ValueError("Grave number must be positive")
        return int(value)

    @property
    def label(self) -> str:
        plot_name = self.plot.name if self.plot else str(self.plot_id)
        return f"{plot_name}-{self.number}"


class StorageEntry(db.Model):
    # Key/value mirror of client-side collections.
    __tablename__ = "storage_entry"

    key: Mapped[str] = mapped_column(db.String(120), primary_key=True)
    value: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)


def seed_demo_data(session) -> None:
    admin = User(
        email="admin@graveyard.local",
        full_name="Graveyard Admin",
        password_hash=generate_password_hash("admin123"),
        role=UserRole.ADMIN,
    )
    staff = User(
        email="staff@graveyard.local",
        full_name="Staff Member",
        password_hash=generate_password_hash("staff123"),
        role=UserRole.STAFF,
    )
    visitor = User(
        email="visitor@graveyard.local",
        full_name="Visitor",
        password_hash=generate_password_hash("visitor123"),
        role=UserRole.VISITOR,
    )
    session.add_all([admin, staff, visitor])
    session.flush()

    north = Plot(name="A", section="North")
    south = Plot(name="B", section="South")
    session.add_all([north, south])
    session.flush()

    session.add_all(
        [Grave(plot_id=north.id, number=number) for number in range(1, 4)]
        + [Grave(plot_id=south.id, number=number) for number in range(1, 3)]
    )
    session.commit()
