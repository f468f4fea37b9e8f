"""Doctor service for business logic."""

from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.clock import Clock, utc_now
from app.core.exceptions import ConflictException, NotFoundException
from app.core.redis_client import DOCTOR_LIST_PATTERN, CacheManager, doctor_cache_key
from app.models.doctors import doctors
from app.schemas.doctors import (
    DoctorCreate,
    DoctorStatsResponse,
    DoctorStatsSnapshot,
    DoctorUpdate,
)
from app.services.stats_service import AggregateRecalculator, DoctorStatsStore, coerce_identifier

logger = structlog.get_logger()


class DoctorService:
    """Service for doctor profiles and their cached statistics."""

    def __init__(self, cache_manager: CacheManager | None = None, clock: Clock = utc_now):
        """Initialize service with optional cache manager."""
        self.cache = cache_manager
        self.clock = clock

    async def create_doctor(self, db: AsyncSession, doctor_data: DoctorCreate) -> dict:
        """
        Create a doctor profile.

        Statistics start at zero and are only ever written by the stats store.

        Raises:
            ConflictException: If the user already has a doctor profile
        """
        existing = await self.get_doctor_by_user_id(db, doctor_data.user_id)
        if existing:
            raise ConflictException("Doctor profile already exists for this user")

        values = doctor_data.model_dump(mode="json", exclude={"user_id", "consultation_fee"})
        values["user_id"] = doctor_data.user_id
        values["consultation_fee"] = doctor_data.consultation_fee

        query = insert(doctors).values(**values).returning(doctors)
        result = await db.execute(query)
        doctor = result.mappings().first()
        await db.commit()

        if not doctor:
            raise ValueError("Failed to create doctor")

        if self.cache:
            self.cache.delete_pattern(DOCTOR_LIST_PATTERN)

        return dict(doctor)

    async def get_doctor_by_id(self, db: AsyncSession, doctor_id: UUID) -> dict | None:
        """Get doctor by ID with caching."""
        if self.cache:
            cached = self.cache.get_json(doctor_cache_key(doctor_id))
            if cached:
                return cached

        query = select(doctors).where(doctors.c.id == doctor_id)
        result = await db.execute(query)
        doctor = result.mappings().first()

        if not doctor:
            return None

        doctor_dict = dict(doctor)

        if self.cache:
            self.cache.set_json(
                doctor_cache_key(doctor_id),
                doctor_dict,
                ttl=settings.doctor_cache_ttl,
            )

        return doctor_dict

    async def get_doctor_by_user_id(self, db: AsyncSession, user_id: UUID) -> dict | None:
        """Get doctor by user ID."""
        query = select(doctors).where(doctors.c.user_id == user_id)
        result = await db.execute(query)
        doctor = result.mappings().first()

        return dict(doctor) if doctor else None

    async def update_doctor(
        self, db: AsyncSession, doctor_id: UUID, doctor_data: DoctorUpdate
    ) -> dict | None:
        """Update doctor profile fields."""
        existing = await self.get_doctor_by_id(db, doctor_id)
        if not existing:
            return None

        update_values = {
            field: value
            for field, value in doctor_data.model_dump(mode="json", exclude_unset=True).items()
            if value is not None
        }
        if doctor_data.consultation_fee is not None:
            update_values["consultation_fee"] = doctor_data.consultation_fee

        if not update_values:
            return existing

        update_values["updated_at"] = self.clock()

        query = (
            update(doctors)
            .where(doctors.c.id == doctor_id)
            .values(**update_values)
            .returning(doctors)
        )
        result = await db.execute(query)
        updated_doctor = result.mappings().first()
        await db.commit()

        if self.cache:
            self.cache.invalidate_doctor(doctor_id)

        return dict(updated_doctor) if updated_doctor else None

    async def delete_doctor(self, db: AsyncSession, doctor_id: UUID) -> bool:
        """Delete a doctor profile."""
        query = delete(doctors).where(doctors.c.id == doctor_id).returning(doctors.c.id)
        result = await db.execute(query)
        deleted = result.fetchone()
        await db.commit()

        if self.cache:
            self.cache.invalidate_doctor(doctor_id)

        return deleted is not None

    async def get_stats(self, db: AsyncSession, doctor_id: UUID | str) -> DoctorStatsResponse:
        """
        Cached statistics as stored on the doctor record.

        Raises:
            InvalidArgumentException: If doctor_id is malformed
            NotFoundException: If doctor not found
        """
        doctor_uuid = coerce_identifier(doctor_id)
        query = select(
            doctors.c.id,
            doctors.c.number_of_consultations,
            doctors.c.rating,
            doctors.c.total_reviews,
            doctors.c.stats_last_updated,
        ).where(doctors.c.id == doctor_uuid)
        result = await db.execute(query)
        row = result.fetchone()

        if not row:
            raise NotFoundException("Doctor not found")

        return DoctorStatsResponse(
            doctor_id=row.id,
            number_of_consultations=row.number_of_consultations,
            rating=row.rating,
            total_reviews=row.total_reviews,
            stats_last_updated=row.stats_last_updated,
        )

    async def refresh_stats(self, db: AsyncSession, doctor_id: UUID | str) -> DoctorStatsSnapshot:
        """
        Recompute a doctor's statistics from scratch and persist them.

        Idempotent repair for statistics left stale by a failed hook.

        Raises:
            InvalidArgumentException: If doctor_id is malformed
            NotFoundException: If doctor not found
        """
        doctor_uuid = coerce_identifier(doctor_id)
        snapshot = await AggregateRecalculator(db).recompute(doctor_uuid)

        store = DoctorStatsStore(db, clock=self.clock, cache_manager=self.cache)
        if not await store.write_snapshot(doctor_uuid, snapshot):
            raise NotFoundException("Doctor not found")

        logger.info(
            "doctor_stats_refreshed",
            doctor_id=str(doctor_uuid),
            number_of_consultations=snapshot.consultation_count,
            rating=str(snapshot.average_rating),
            total_reviews=snapshot.review_count,
        )
        return snapshot
