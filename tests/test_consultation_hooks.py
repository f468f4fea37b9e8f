"""Tests for consultations and the doctor consultation counter."""

from decimal import Decimal
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException
from app.schemas.consultations import (
    ConsultationCreate,
    ConsultationStatus,
    ConsultationStatusUpdate,
)
from app.services.consultation_service import ConsultationService
from app.services.stats_hooks import ConsultationMutationHook
from app.services.stats_service import AggregateRecalculator, DoctorStatsStore


class BrokenStatsStore(DoctorStatsStore):
    """Stats store whose counter update always fails."""

    async def adjust_consultation_count(self, doctor_id, delta):
        raise RuntimeError("connection reset")


@pytest.fixture
def consultation_service(db_session: AsyncSession, clock, reporter) -> ConsultationService:
    """Consultation service with a deterministic clock and recorded failures."""
    hook = ConsultationMutationHook.for_session(db_session, clock=clock, reporter=reporter)
    return ConsultationService(db_session, hook=hook)


def consultation_data(
    doctor_id,
    status: ConsultationStatus = ConsultationStatus.COMPLETED,
) -> ConsultationCreate:
    """Consultation for a fresh appointment."""
    return ConsultationCreate(
        doctor_id=doctor_id,
        patient_id=uuid4(),
        appointment_id=uuid4(),
        status=status,
        fees=Decimal("450.00"),
        duration_minutes=20,
    )


@pytest.mark.asyncio
async def test_completed_consultation_increments(
    consultation_service: ConsultationService, test_doctor: dict, fetch_doctor, fixed_now
):
    """A completed consultation adds one and stamps the stats."""
    await consultation_service.create_consultation(consultation_data(test_doctor["id"]))

    row = await fetch_doctor(test_doctor["id"])
    assert row.number_of_consultations == 1
    assert row.stats_last_updated.replace(tzinfo=None) == fixed_now.replace(tzinfo=None)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [ConsultationStatus.CANCELLED, ConsultationStatus.NO_SHOW])
async def test_non_completed_consultation_not_counted(
    consultation_service: ConsultationService, test_doctor: dict, fetch_doctor, status
):
    """Cancelled and no-show consultations leave the counter alone."""
    await consultation_service.create_consultation(consultation_data(test_doctor["id"], status))

    row = await fetch_doctor(test_doctor["id"])
    assert row.number_of_consultations == 0


@pytest.mark.asyncio
async def test_delete_completed_decrements(
    consultation_service: ConsultationService, test_doctor: dict, fetch_doctor
):
    """With three counted, deleting one leaves two."""
    doctor_id = test_doctor["id"]
    created = [
        await consultation_service.create_consultation(consultation_data(doctor_id))
        for _ in range(3)
    ]
    assert (await fetch_doctor(doctor_id)).number_of_consultations == 3

    deleted = await consultation_service.delete_consultation(created[0].id)

    assert deleted.id == created[0].id
    assert (await fetch_doctor(doctor_id)).number_of_consultations == 2


@pytest.mark.asyncio
async def test_delete_non_completed_leaves_counter(
    consultation_service: ConsultationService, test_doctor: dict, fetch_doctor
):
    """Deleting a cancelled consultation changes nothing."""
    doctor_id = test_doctor["id"]
    await consultation_service.create_consultation(consultation_data(doctor_id))
    cancelled = await consultation_service.create_consultation(
        consultation_data(doctor_id, ConsultationStatus.CANCELLED)
    )

    await consultation_service.delete_consultation(cancelled.id)

    assert (await fetch_doctor(doctor_id)).number_of_consultations == 1


@pytest.mark.asyncio
async def test_delete_missing_consultation(
    consultation_service: ConsultationService, test_doctor: dict, fetch_doctor
):
    """Deleting nothing raises and leaves the counter alone."""
    await consultation_service.create_consultation(consultation_data(test_doctor["id"]))

    with pytest.raises(NotFoundException):
        await consultation_service.delete_consultation(uuid4())

    assert (await fetch_doctor(test_doctor["id"])).number_of_consultations == 1


@pytest.mark.asyncio
async def test_status_change_moves_counter(
    consultation_service: ConsultationService, test_doctor: dict, fetch_doctor
):
    """Leaving completed uncounts, entering completed counts, others do nothing."""
    doctor_id = test_doctor["id"]
    consultation = await consultation_service.create_consultation(consultation_data(doctor_id))

    await consultation_service.update_consultation_status(
        consultation.id, ConsultationStatusUpdate(status=ConsultationStatus.CANCELLED)
    )
    assert (await fetch_doctor(doctor_id)).number_of_consultations == 0

    await consultation_service.update_consultation_status(
        consultation.id, ConsultationStatusUpdate(status=ConsultationStatus.NO_SHOW)
    )
    assert (await fetch_doctor(doctor_id)).number_of_consultations == 0

    updated = await consultation_service.update_consultation_status(
        consultation.id, ConsultationStatusUpdate(status=ConsultationStatus.COMPLETED)
    )
    assert updated.status == ConsultationStatus.COMPLETED
    assert (await fetch_doctor(doctor_id)).number_of_consultations == 1


@pytest.mark.asyncio
async def test_duplicate_consultation_for_appointment_conflicts(
    consultation_service: ConsultationService, test_doctor: dict, fetch_doctor
):
    """One consultation per appointment; the rejected insert is not counted."""
    data = consultation_data(test_doctor["id"])
    await consultation_service.create_consultation(data)

    with pytest.raises(ConflictException):
        await consultation_service.create_consultation(data)

    assert (await fetch_doctor(test_doctor["id"])).number_of_consultations == 1


@pytest.mark.asyncio
async def test_counter_matches_recompute_after_mixed_writes(
    consultation_service: ConsultationService,
    db_session: AsyncSession,
    test_doctor: dict,
    fetch_doctor,
):
    """The incremental counter agrees with a full recount."""
    doctor_id = test_doctor["id"]
    statuses = [
        ConsultationStatus.COMPLETED,
        ConsultationStatus.NO_SHOW,
        ConsultationStatus.COMPLETED,
        ConsultationStatus.CANCELLED,
        ConsultationStatus.COMPLETED,
    ]
    created = [
        await consultation_service.create_consultation(consultation_data(doctor_id, status))
        for status in statuses
    ]
    await consultation_service.delete_consultation(created[0].id)
    await consultation_service.delete_consultation(created[1].id)
    await consultation_service.update_consultation_status(
        created[3].id, ConsultationStatusUpdate(status=ConsultationStatus.COMPLETED)
    )

    expected = await AggregateRecalculator(db_session).count_completed_consultations(doctor_id)
    row = await fetch_doctor(doctor_id)

    assert row.number_of_consultations == expected == 3


@pytest.mark.asyncio
async def test_hook_failure_keeps_consultation(
    db_session: AsyncSession, test_doctor: dict, reporter, clock
):
    """A failed counter update is reported, never raised."""
    hook = ConsultationMutationHook(
        AggregateRecalculator(db_session),
        BrokenStatsStore(db_session, clock=clock),
        reporter,
    )
    service = ConsultationService(db_session, hook=hook)

    consultation = await service.create_consultation(consultation_data(test_doctor["id"]))

    assert (await service.get_consultation(consultation.id)).id == consultation.id
    assert len(reporter.reports) == 1
    assert reporter.reports[0]["hook"] == "consultation_mutation"
    assert reporter.reports[0]["trigger"] == "consultation_created"


@pytest.mark.asyncio
async def test_consultation_endpoints(client: AsyncClient, test_doctor: dict):
    """Create, change status and delete over HTTP, watching the counter."""
    doctor_id = str(test_doctor["id"])
    response = await client.post(
        "/api/v1/consultations/",
        json={
            "doctor_id": doctor_id,
            "patient_id": str(uuid4()),
            "appointment_id": str(uuid4()),
            "fees": 300,
        },
    )
    assert response.status_code == 201
    consultation = response.json()
    assert consultation["status"] == "completed"
    assert consultation["fees"] == 300.0

    stats = await client.get(f"/api/v1/doctors/{doctor_id}/stats")
    assert stats.json()["number_of_consultations"] == 1

    response = await client.patch(
        f"/api/v1/consultations/{consultation['id']}/status",
        json={"status": "no-show"},
    )
    assert response.status_code == 200
    stats = await client.get(f"/api/v1/doctors/{doctor_id}/stats")
    assert stats.json()["number_of_consultations"] == 0

    response = await client.delete(f"/api/v1/consultations/{consultation['id']}")
    assert response.status_code == 204

    response = await client.get(f"/api/v1/consultations/{consultation['id']}")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFoundException"


@pytest.mark.asyncio
async def test_concurrent_status_changes_count_once(
    db_session: AsyncSession,
    second_session: AsyncSession,
    test_doctor: dict,
    fetch_doctor,
    clock,
    reporter,
):
    """Two writers completing the same consultation only count it once."""
    doctor_id = test_doctor["id"]
    setup = ConsultationService(
        db_session,
        hook=ConsultationMutationHook.for_session(db_session, clock=clock, reporter=reporter),
    )
    consultation = await setup.create_consultation(
        consultation_data(doctor_id, ConsultationStatus.CANCELLED)
    )
    other_writer = ConsultationService(
        second_session,
        hook=ConsultationMutationHook.for_session(second_session, clock=clock, reporter=reporter),
    )
    to_completed = ConsultationStatusUpdate(status=ConsultationStatus.COMPLETED)

    class InterleavedService(ConsultationService):
        """Lets the other writer commit right after this one reads."""

        interleaved = False

        async def get_consultation(self, consultation_id):
            current = await super().get_consultation(consultation_id)
            if not self.interleaved:
                self.interleaved = True
                await other_writer.update_consultation_status(consultation_id, to_completed)
            return current

    service = InterleavedService(
        db_session,
        hook=ConsultationMutationHook.for_session(db_session, clock=clock, reporter=reporter),
    )

    result = await service.update_consultation_status(consultation.id, to_completed)

    assert result.status == ConsultationStatus.COMPLETED
    expected = await AggregateRecalculator(db_session).count_completed_consultations(doctor_id)
    row = await fetch_doctor(doctor_id)
    assert row.number_of_consultations == expected == 1
    assert reporter.reports == []
