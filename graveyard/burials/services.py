from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Callable

import structlog

from graveyard.burials.models import (
    MAX_AGE,
    MIN_AGE,
    ApproveRecordRequest,
    BurialRecord,
    CreateBurialRecordRequest,
    RecordStatus,
    RejectRecordRequest,
    UpdateBurialRecordRequest,
)
from graveyard.core.errors import DuplicateRecordError, InvalidTransitionError, ValidationError
from graveyard.core.models import utcnow

logger = structlog.get_logger(__name__)

DUPLICATE_MESSAGE = "A burial record with the same name, father's name, and date of death already exists"


class DecisionPolicy(str, Enum):
    OVERRIDE = "override"
    FINAL = "final"


def _validate_age(age: int | None) -> None:
    if age is None or age < MIN_AGE or age > MAX_AGE:
        raise ValidationError(f"Age must be between {MIN_AGE} and {MAX_AGE}")


class BurialRecordService:
    """Burial records held in memory only; there is no storage mirror."""

    def __init__(
        self,
        policy: DecisionPolicy = DecisionPolicy.OVERRIDE,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.policy = policy
        self._clock = clock
        self._records: list[BurialRecord] = []
        self._lock = threading.RLock()

    def list_records(self) -> list[BurialRecord]:
        with self._lock:
            return list(self._records)

    def get_record(self, record_id: str) -> BurialRecord | None:
        with self._lock:
            return next((record for record in self._records if record.id == record_id), None)

    def record_for_grave(self, grave_id: str) -> BurialRecord | None:
        with self._lock:
            return next(
                (
                    record
                    for record in self._records
                    if record.grave_id == grave_id and record.status == RecordStatus.APPROVED
                ),
                None,
            )

    def check_duplicate(
        self,
        name: str,
        father_name: str,
        date_of_death: str,
        exclude_id: str | None = None,
    ) -> bool:
        with self._lock:
            return any(
                record.matches(name, father_name, date_of_death) and record.id != exclude_id
                for record in self._records
            )

    def create_record(self, request: CreateBurialRecordRequest) -> BurialRecord:
        if not all(
            [
                request.name,
                request.father_name,
                request.date_of_death,
                request.age is not None,
                request.religion,
                request.plot_id,
                request.grave_id,
            ]
        ):
            raise ValidationError("All fields are required")
        _validate_age(request.age)

        with self._lock:
            if self.check_duplicate(request.name, request.father_name, request.date_of_death):
                raise DuplicateRecordError(DUPLICATE_MESSAGE)
            record = BurialRecord(
                id=uuid.uuid4().hex,
                name=request.name,
                father_name=request.father_name,
                date_of_death=request.date_of_death,
                gender=request.gender,
                age=request.age,
                religion=request.religion,
                plot_id=request.plot_id,
                grave_id=request.grave_id,
                status=RecordStatus.PENDING,
                created_at=self._clock(),
                phone_number=request.phone_number,
                address=request.address,
            )
            self._records = [record, *self._records]
        logger.debug("burials.record_created", record_id=record.id, grave_id=record.grave_id)
        return record

    def _replace(self, record_id: str, **changes) -> BurialRecord | None:
        with self._lock:
            for index, record in enumerate(self._records):
                if record.id == record_id:
                    updated = replace(record, **changes)
                    records = list(self._records)
                    records[index] = updated
                    self._records = records
                    return updated
        return None

    def update_record(self, request: UpdateBurialRecordRequest) -> BurialRecord | None:
        if not all(
            [
                request.name,
                request.father_name,
                request.date_of_death,
                request.age is not None,
                request.religion,
            ]
        ):
            raise ValidationError("All required fields must be filled")
        _validate_age(request.age)

        with self._lock:
            if self.check_duplicate(
                request.name,
                request.father_name,
                request.date_of_death,
                exclude_id=request.record_id,
            ):
                raise DuplicateRecordError(DUPLICATE_MESSAGE)
            return self._replace(
                request.record_id,
                name=request.name,
                father_name=request.father_name,
                date_of_death=request.date_of_death,
                gender=request.gender,
                age=request.age,
                religion=request.religion,
                phone_number=request.phone_number,
                address=request.address,
            )

    def delete_record(self, record_id: str) -> bool:
        with self._lock:
            remaining = [record for record in self._records if record.id != record_id]
            removed = len(remaining) != len(self._records)
            self._records = remaining
        return removed

    def _ensure_undecided(self, record_id: str) -> None:
        if self.policy != DecisionPolicy.FINAL:
            return
        record = self.get_record(record_id)
        if record is not None and record.status != RecordStatus.PENDING:
            raise InvalidTransitionError(f"Record already {record.status.value}")

    def approve_record(self, request: ApproveRecordRequest) -> BurialRecord | None:
        with self._lock:
            self._ensure_undecided(request.record_id)
            record = self._replace(
                request.record_id,
                status=RecordStatus.APPROVED,
                approved_by=request.approved_by,
                approved_at=self._clock(),
            )
        if record is not None:
            logger.info("burials.record_approved", record_id=record.id, approved_by=request.approved_by)
        return record

    def reject_record(self, request: RejectRecordRequest) -> BurialRecord | None:
        with self._lock:
            self._ensure_undecided(request.record_id)
            record = self._replace(
                request.record_id,
                status=RecordStatus.REJECTED,
                notes=request.reason,
            )
        if record is not None:
            logger.info("burials.record_rejected", record_id=record.id)
        return record
