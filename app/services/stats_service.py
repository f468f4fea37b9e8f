"""Doctor statistics: recomputation from source records and the stats store."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, utc_now
from app.core.exceptions import InvalidArgumentException
from app.core.redis_client import CacheManager
from app.models.consultations import consultations
from app.models.doctors import doctors
from app.models.reviews import reviews
from app.schemas.consultations import ConsultationStatus
from app.schemas.doctors import DoctorStatsSnapshot, RatingAggregate

logger = structlog.get_logger()

RATING_QUANTUM = Decimal("0.1")


def coerce_identifier(value: Any, kind: str = "doctor") -> UUID:
    """
    Parse a record identifier.

    Raises:
        InvalidArgumentException: If the value is not a valid UUID
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as e:
        raise InvalidArgumentException(f"Invalid {kind} id: {value!r}") from e


def round_rating(total: int, count: int) -> Decimal:
    """Mean of ``count`` ratings summing to ``total``, rounded half-up to 0.1."""
    if count == 0:
        return Decimal("0")
    mean = Decimal(total) / Decimal(count)
    return mean.quantize(RATING_QUANTUM, rounding=ROUND_HALF_UP)


class AggregateRecalculator:
    """Computes a doctor's statistics from consultations and reviews. Read only."""

    def __init__(self, db: AsyncSession):
        """Initialize with database session."""
        self.db = db

    async def count_completed_consultations(self, doctor_id: UUID | str) -> int:
        """Number of completed consultations for the doctor."""
        doctor_uuid = coerce_identifier(doctor_id)
        stmt = (
            select(func.count())
            .select_from(consultations)
            .where(
                consultations.c.doctor_id == doctor_uuid,
                consultations.c.status == ConsultationStatus.COMPLETED.value,
            )
        )
        result = await self.db.execute(stmt)
        return int(result.scalar() or 0)

    async def recompute_rating(self, doctor_id: UUID | str) -> RatingAggregate:
        """Average rating and review count over every review of the doctor."""
        doctor_uuid = coerce_identifier(doctor_id)
        stmt = select(
            func.count(reviews.c.id),
            func.coalesce(func.sum(reviews.c.rating), 0),
        ).where(reviews.c.doctor_id == doctor_uuid)
        result = await self.db.execute(stmt)
        count, total = result.one()
        return RatingAggregate(
            average_rating=round_rating(int(total), int(count)),
            review_count=int(count),
        )

    async def recompute(self, doctor_id: UUID | str) -> DoctorStatsSnapshot:
        """
        Full statistics snapshot for a doctor.

        Args:
            doctor_id: Doctor ID

        Returns:
            Completed consultation count, rounded average rating, review count

        Raises:
            InvalidArgumentException: If doctor_id is malformed
        """
        doctor_uuid = coerce_identifier(doctor_id)
        consultation_count = await self.count_completed_consultations(doctor_uuid)
        rating = await self.recompute_rating(doctor_uuid)
        return DoctorStatsSnapshot(
            consultation_count=consultation_count,
            average_rating=rating.average_rating,
            review_count=rating.review_count,
        )


class DoctorStatsStore:
    """
    Sole writer of the cached statistics columns on ``doctors``.

    Each write commits on its own and stamps ``stats_last_updated``.
    """

    def __init__(
        self,
        db: AsyncSession,
        clock: Clock = utc_now,
        cache_manager: CacheManager | None = None,
    ):
        """Initialize store with session, time source and optional cache."""
        self.db = db
        self.clock = clock
        self.cache = cache_manager

    async def write_rating(self, doctor_id: UUID | str, aggregate: RatingAggregate) -> bool:
        """Overwrite rating and total_reviews."""
        return await self._write(
            doctor_id,
            rating=aggregate.average_rating,
            total_reviews=aggregate.review_count,
        )

    async def adjust_consultation_count(self, doctor_id: UUID | str, delta: int) -> bool:
        """Atomically add ``delta`` to number_of_consultations, floored at zero."""
        column = doctors.c.number_of_consultations
        if delta >= 0:
            value = column + delta
        else:
            value = case((column + delta < 0, 0), else_=column + delta)
        return await self._write(doctor_id, number_of_consultations=value)

    async def write_snapshot(self, doctor_id: UUID | str, snapshot: DoctorStatsSnapshot) -> bool:
        """Overwrite every statistics column from a full recompute."""
        return await self._write(
            doctor_id,
            number_of_consultations=snapshot.consultation_count,
            rating=snapshot.average_rating,
            total_reviews=snapshot.review_count,
        )

    async def discard(self) -> None:
        """Roll back a failed write so the session stays usable."""
        await self.db.rollback()

    async def _write(self, doctor_id: UUID | str, **values: Any) -> bool:
        doctor_uuid = coerce_identifier(doctor_id)
        stmt = (
            update(doctors)
            .where(doctors.c.id == doctor_uuid)
            .values(**values, stats_last_updated=self.clock())
        )
        result = await self.db.execute(stmt)
        updated = result.rowcount
        await self.db.commit()

        if self.cache:
            self.cache.invalidate_doctor(doctor_uuid)

        if updated == 0:
            logger.warning("doctor_stats_target_missing", doctor_id=str(doctor_uuid))
            return False
        return True
