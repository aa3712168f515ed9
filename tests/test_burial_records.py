from __future__ import annotations

import pytest

from graveyard.burials.models import (
    ApproveRecordRequest,
    CreateBurialRecordRequest,
    RecordStatus,
    RejectRecordRequest,
    UpdateBurialRecordRequest,
)
from graveyard.burials.services import BurialRecordService, DecisionPolicy
from graveyard.core.errors import DuplicateRecordError, InvalidTransitionError, ValidationError


@pytest.fixture
def burials(clock):
    return BurialRecordService(clock=clock)


def _create(service: BurialRecordService, **overrides):
    fields = {
        "name": "Jane Doe",
        "father_name": "John Doe",
        "date_of_death": "2024-01-01",
        "age": 80,
        "religion": "Catholic",
        "plot_id": "1",
        "grave_id": "1",
    }
    fields.update(overrides)
    return service.create_record(CreateBurialRecordRequest(**fields))


def _update_request(record, **overrides):
    fields = {
        "record_id": record.id,
        "name": record.name,
        "father_name": record.father_name,
        "date_of_death": record.date_of_death,
        "age": record.age,
        "religion": record.religion,
    }
    fields.update(overrides)
    return UpdateBurialRecordRequest(**fields)


def test_new_record_is_pending(burials, clock):
    record = _create(burials)
    assert record.status == RecordStatus.PENDING
    assert record.created_at == clock.now
    assert burials.list_records() == [record]


def test_duplicate_is_case_insensitive_on_names(burials):
    _create(burials)
    with pytest.raises(DuplicateRecordError, match="already exists"):
        _create(burials, name="JANE DOE", father_name="john doe", grave_id="2")
    assert len(burials.list_records()) == 1


def test_duplicate_needs_exact_date_of_death(burials):
    _create(burials)
    other = _create(burials, date_of_death="2024-01-02", grave_id="2")
    assert other.status == RecordStatus.PENDING
    assert burials.check_duplicate("jane doe", "JOHN DOE", "2024-01-01")
    assert not burials.check_duplicate("Jane Doe", "John Doe", "2024-1-1")


def test_editing_record_to_itself_is_not_a_duplicate(burials):
    record = _create(burials)
    updated = burials.update_record(_update_request(record, religion="Orthodox"))
    assert updated.religion == "Orthodox"
    assert updated.name == "Jane Doe"


def test_editing_into_another_records_identity_is_rejected(burials):
    _create(burials)
    second = _create(burials, name="Mary Roe", grave_id="2")
    with pytest.raises(DuplicateRecordError):
        burials.update_record(_update_request(second, name="jane doe"))
    assert burials.get_record(second.id).name == "Mary Roe"


@pytest.mark.parametrize("age", [-1, 151])
def test_age_out_of_range_is_rejected(burials, age):
    with pytest.raises(ValidationError, match="between 0 and 150"):
        _create(burials, age=age)
    assert burials.list_records() == []


@pytest.mark.parametrize("age", [0, 150])
def test_age_bounds_are_accepted(burials, age):
    assert _create(burials, age=age).age == age


def test_missing_fields_are_rejected(burials):
    with pytest.raises(ValidationError, match="All fields are required"):
        _create(burials, religion="")
    with pytest.raises(ValidationError, match="All fields are required"):
        _create(burials, age=None)


def test_payload_parsing():
    request = CreateBurialRecordRequest.from_payload(
        {
            "name": " Jane Doe ",
            "fatherName": "John Doe",
            "dateOfDeath": "2024-01-01",
            "age": "0",
            "gender": "female",
            "religion": "None",
            "plotId": 1,
            "graveId": 2,
        }
    )
    assert request.name == "Jane Doe"
    assert request.age == 0
    assert request.grave_id == "2"
    with pytest.raises(ValidationError, match="whole number"):
        CreateBurialRecordRequest.from_payload({"age": "eighty"})


def test_approve_and_reject_stamp_the_record(burials, clock):
    record = _create(burials)
    approved = burials.approve_record(ApproveRecordRequest(record_id=record.id, approved_by="1"))
    assert approved.status == RecordStatus.APPROVED
    assert approved.approved_by == "1"
    assert approved.approved_at == clock.now
    assert burials.record_for_grave("1") == approved

    rejected = burials.reject_record(RejectRecordRequest(record_id=record.id, reason="Wrong plot"))
    assert rejected.status == RecordStatus.REJECTED
    assert rejected.notes == "Wrong plot"
    assert burials.record_for_grave("1") is None


def test_final_policy_locks_the_first_decision(clock):
    service = BurialRecordService(policy=DecisionPolicy.FINAL, clock=clock)
    record = _create(service)
    service.reject_record(RejectRecordRequest(record_id=record.id, reason="Missing certificate"))

    with pytest.raises(InvalidTransitionError, match="already rejected"):
        service.approve_record(ApproveRecordRequest(record_id=record.id, approved_by="1"))
    assert service.get_record(record.id).status == RecordStatus.REJECTED


def test_unknown_record_ids_are_noops(burials):
    _create(burials)
    assert burials.approve_record(ApproveRecordRequest(record_id="nope", approved_by="1")) is None
    assert burials.reject_record(RejectRecordRequest(record_id="nope", reason="x")) is None
    assert burials.update_record(_update_request(burials.list_records()[0], record_id="nope", name="Someone Else")) is None
    assert burials.delete_record("nope") is False
    assert len(burials.list_records()) == 1


def test_delete_frees_the_identity(burials):
    record = _create(burials)
    assert burials.delete_record(record.id) is True
    assert _create(burials).id != record.id
