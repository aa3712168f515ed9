from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from graveyard.core.errors import ValidationError
from graveyard.core.models import utcnow

MIN_AGE = 0
MAX_AGE = 150


class RecordStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


@dataclass
class BurialRecord:
    id: str
    name: str
    father_name: str
    date_of_death: str
    gender: Gender
    age: int
    religion: str
    plot_id: str
    grave_id: str
    status: RecordStatus = RecordStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    approved_by: str | None = None
    approved_at: datetime | None = None
    notes: str | None = None
    phone_number: str | None = None
    address: str | None = None

    def matches(self, name: str, father_name: str, date_of_death: str) -> bool:
        return (
            self.name.lower() == name.lower()
            and self.father_name.lower() == father_name.lower()
            and self.date_of_death == date_of_death
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "fatherName": self.father_name,
            "dateOfDeath": self.date_of_death,
            "gender": self.gender.value,
            "age": self.age,
            "religion": self.religion,
            "plotId": self.plot_id,
            "graveId": self.grave_id,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "approvedBy": self.approved_by,
            "approvedAt": self.approved_at.isoformat() if self.approved_at else None,
            "notes": self.notes,
            "phoneNumber": self.phone_number,
            "address": self.address,
        }


def _clean(value: Any) -> str:
    return str(value if value is not None else "").strip()


def _parse_age(value: Any) -> int | None:
    if isinstance(value, bool):
        raise ValidationError("Age must be a whole number")
    if isinstance(value, int):
        return value
    raw = _clean(value)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError("Age must be a whole number") from exc


def _parse_gender(value: Any) -> Gender:
    raw = _clean(value).lower() or Gender.MALE.value
    try:
        return Gender(raw)
    except ValueError as exc:
        raise ValidationError(f"Unknown gender: {raw}") from exc


@dataclass(frozen=True)
class CreateBurialRecordRequest:
    name: str
    father_name: str
    date_of_death: str
    age: int | None
    religion: str
    plot_id: str
    grave_id: str
    gender: Gender = Gender.MALE
    phone_number: str | None = None
    address: str | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> CreateBurialRecordRequest:
        return cls(
            name=_clean(payload.get("name")),
            father_name=_clean(payload.get("fatherName")),
            date_of_death=_clean(payload.get("dateOfDeath")),
            age=_parse_age(payload.get("age")),
            religion=_clean(payload.get("religion")),
            plot_id=_clean(payload.get("plotId")),
            grave_id=_clean(payload.get("graveId")),
            gender=_parse_gender(payload.get("gender")),
            phone_number=_clean(payload.get("phoneNumber")) or None,
            address=_clean(payload.get("address")) or None,
        )


@dataclass(frozen=True)
class UpdateBurialRecordRequest:
    record_id: str
    name: str
    father_name: str
    date_of_death: str
    age: int | None
    religion: str
    gender: Gender = Gender.MALE
    phone_number: str | None = None
    address: str | None = None

    @classmethod
    def from_payload(cls, record_id: str, payload: dict[str, Any]) -> UpdateBurialRecordRequest:
        return cls(
            record_id=record_id,
            name=_clean(payload.get("name")),
            father_name=_clean(payload.get("fatherName")),
            date_of_death=_clean(payload.get("dateOfDeath")),
            age=_parse_age(payload.get("age")),
            religion=_clean(payload.get("religion")),
            gender=_parse_gender(payload.get("gender")),
            phone_number=_clean(payload.get("phoneNumber")) or None,
            address=_clean(payload.get("address")) or None,
        )


@dataclass(frozen=True)
class ApproveRecordRequest:
    record_id: str
    approved_by: str


@dataclass(frozen=True)
class RejectRecordRequest:
    record_id: str
    reason: str
