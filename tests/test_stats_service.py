"""Tests for statistics recomputation and the doctor stats store."""

from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy import insert, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InvalidArgumentException
from app.models.consultations import consultations
from app.models.doctors import doctors
from app.models.reviews import reviews
from app.schemas.doctors import DoctorStatsSnapshot, RatingAggregate
from app.services.stats_service import (
    AggregateRecalculator,
    DoctorStatsStore,
    coerce_identifier,
    round_rating,
)


async def insert_review(db: AsyncSession, doctor_id, rating: int) -> None:
    """Insert a review row without going through the service."""
    await db.execute(
        insert(reviews).values(
            doctor_id=doctor_id,
            patient_id=uuid4(),
            appointment_id=uuid4(),
            rating=rating,
        )
    )
    await db.commit()


async def insert_consultation(db: AsyncSession, doctor_id, status: str = "completed") -> None:
    """Insert a consultation row without going through the service."""
    await db.execute(
        insert(consultations).values(
            doctor_id=doctor_id,
            patient_id=uuid4(),
            appointment_id=uuid4(),
            status=status,
            fees=Decimal("300.00"),
        )
    )
    await db.commit()


# ============================================================================
# Rounding and identifiers
# ============================================================================


def test_round_rating_one_decimal():
    """4, 5, 5 averages 4.666... and rounds to 4.7."""
    assert round_rating(14, 3) == Decimal("4.7")


def test_round_rating_half_up():
    """Ties round away from zero, not to even."""
    assert round_rating(17, 4) == Decimal("4.3")  # 4.25
    assert round_rating(81, 20) == Decimal("4.1")  # 4.05


def test_round_rating_no_reviews():
    """No reviews means a zero rating."""
    assert round_rating(0, 0) == Decimal("0")


def test_coerce_identifier_accepts_strings_and_uuids():
    """Both UUID instances and their string form are accepted."""
    value = uuid4()
    assert coerce_identifier(value) is value
    assert coerce_identifier(str(value)) == value


@pytest.mark.parametrize("bad", ["not-a-uuid", "", None, 42])
def test_coerce_identifier_rejects_malformed(bad):
    """Malformed identifiers raise InvalidArgumentException."""
    with pytest.raises(InvalidArgumentException) as exc_info:
        coerce_identifier(bad)
    assert exc_info.value.status_code == 400


# ============================================================================
# AggregateRecalculator
# ============================================================================


@pytest.mark.asyncio
async def test_recompute_without_records(db_session: AsyncSession, test_doctor: dict):
    """A doctor with no history has an all-zero snapshot."""
    snapshot = await AggregateRecalculator(db_session).recompute(test_doctor["id"])

    assert snapshot == DoctorStatsSnapshot(
        consultation_count=0,
        average_rating=Decimal("0"),
        review_count=0,
    )


@pytest.mark.asyncio
async def test_recompute_counts_only_completed_consultations(
    db_session: AsyncSession, test_doctor: dict
):
    """Cancelled and no-show consultations are not counted."""
    doctor_id = test_doctor["id"]
    await insert_consultation(db_session, doctor_id, "completed")
    await insert_consultation(db_session, doctor_id, "completed")
    await insert_consultation(db_session, doctor_id, "cancelled")
    await insert_consultation(db_session, doctor_id, "no-show")
    await insert_consultation(db_session, uuid4(), "completed")

    snapshot = await AggregateRecalculator(db_session).recompute(doctor_id)

    assert snapshot.consultation_count == 2


@pytest.mark.asyncio
async def test_recompute_rating_over_all_reviews(db_session: AsyncSession, test_doctor: dict):
    """Every review of the doctor counts, and only that doctor's reviews."""
    doctor_id = test_doctor["id"]
    for rating in (4, 5, 5):
        await insert_review(db_session, doctor_id, rating)
    await insert_review(db_session, uuid4(), 1)

    snapshot = await AggregateRecalculator(db_session).recompute(str(doctor_id))

    assert snapshot.average_rating == Decimal("4.7")
    assert snapshot.review_count == 3


@pytest.mark.asyncio
async def test_recompute_is_idempotent(db_session: AsyncSession, test_doctor: dict):
    """Two recomputes with no writes in between agree."""
    doctor_id = test_doctor["id"]
    await insert_review(db_session, doctor_id, 3)
    await insert_consultation(db_session, doctor_id)

    recalculator = AggregateRecalculator(db_session)
    first = await recalculator.recompute(doctor_id)
    second = await recalculator.recompute(doctor_id)

    assert first == second


@pytest.mark.asyncio
async def test_recompute_does_not_write(
    db_session: AsyncSession, test_doctor: dict, fetch_doctor
):
    """Recompute leaves the cached columns alone."""
    doctor_id = test_doctor["id"]
    await insert_review(db_session, doctor_id, 5)

    await AggregateRecalculator(db_session).recompute(doctor_id)

    row = await fetch_doctor(doctor_id)
    assert row.total_reviews == 0
    assert row.rating == Decimal("0")


@pytest.mark.asyncio
async def test_recompute_rejects_malformed_id(db_session: AsyncSession):
    """A malformed doctor id is surfaced to the caller."""
    with pytest.raises(InvalidArgumentException):
        await AggregateRecalculator(db_session).recompute("doctor-42")


# ============================================================================
# DoctorStatsStore
# ============================================================================


@pytest.mark.asyncio
async def test_write_rating_stamps_clock(
    db_session: AsyncSession, test_doctor: dict, clock, fixed_now, fetch_doctor
):
    """Writing a rating also refreshes stats_last_updated."""
    store = DoctorStatsStore(db_session, clock=clock)

    written = await store.write_rating(
        test_doctor["id"],
        RatingAggregate(average_rating=Decimal("4.2"), review_count=5),
    )

    row = await fetch_doctor(test_doctor["id"])
    assert written is True
    assert row.rating == Decimal("4.2")
    assert row.total_reviews == 5
    assert row.stats_last_updated.replace(tzinfo=None) == fixed_now.replace(tzinfo=None)


@pytest.mark.asyncio
async def test_adjust_consultation_count(
    db_session: AsyncSession, test_doctor: dict, clock, fetch_doctor
):
    """Increments and decrements are applied in the database."""
    store = DoctorStatsStore(db_session, clock=clock)
    doctor_id = test_doctor["id"]

    await store.adjust_consultation_count(doctor_id, 1)
    await store.adjust_consultation_count(doctor_id, 1)
    await store.adjust_consultation_count(doctor_id, -1)

    row = await fetch_doctor(doctor_id)
    assert row.number_of_consultations == 1


@pytest.mark.asyncio
async def test_decrement_never_goes_negative(
    db_session: AsyncSession, test_doctor: dict, clock, fetch_doctor
):
    """The counter is floored at zero."""
    store = DoctorStatsStore(db_session, clock=clock)

    await store.adjust_consultation_count(test_doctor["id"], -1)

    row = await fetch_doctor(test_doctor["id"])
    assert row.number_of_consultations == 0


@pytest.mark.asyncio
async def test_write_snapshot_overwrites_every_column(
    db_session: AsyncSession, test_doctor: dict, clock, fetch_doctor
):
    """A snapshot replaces stale values wholesale."""
    doctor_id = test_doctor["id"]
    await db_session.execute(
        update(doctors)
        .where(doctors.c.id == doctor_id)
        .values(number_of_consultations=9, rating=Decimal("1.0"), total_reviews=9)
    )
    await db_session.commit()

    store = DoctorStatsStore(db_session, clock=clock)
    await store.write_snapshot(
        doctor_id,
        DoctorStatsSnapshot(
            consultation_count=2,
            average_rating=Decimal("3.5"),
            review_count=2,
        ),
    )

    row = await fetch_doctor(doctor_id)
    assert row.number_of_consultations == 2
    assert row.rating == Decimal("3.5")
    assert row.total_reviews == 2


@pytest.mark.asyncio
async def test_write_for_missing_doctor_reports_false(db_session: AsyncSession, clock):
    """Writing stats for an unknown doctor is a no-op that returns False."""
    store = DoctorStatsStore(db_session, clock=clock)

    written = await store.adjust_consultation_count(uuid4(), 1)

    assert written is False


@pytest.mark.asyncio
async def test_write_invalidates_doctor_cache(
    db_session: AsyncSession, test_doctor: dict, clock
):
    """Every stats write drops the cached profile and listings."""
    cache = MagicMock()
    store = DoctorStatsStore(db_session, clock=clock, cache_manager=cache)

    await store.adjust_consultation_count(test_doctor["id"], 1)

    cache.invalidate_doctor.assert_called_once_with(test_doctor["id"])
