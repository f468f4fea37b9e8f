"""Consultation service for business logic."""

from uuid import UUID

import structlog
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utc_now
from app.core.exceptions import ConflictException, NotFoundException
from app.core.redis_client import CacheManager
from app.models.consultations import consultations
from app.schemas.consultations import (
    ConsultationCreate,
    ConsultationResponse,
    ConsultationStatusUpdate,
)
from app.services.stats_hooks import ConsultationMutationHook

logger = structlog.get_logger()


class ConsultationService:
    """Service for recording consultations."""

    def __init__(
        self,
        db: AsyncSession,
        hook: ConsultationMutationHook | None = None,
        cache_manager: CacheManager | None = None,
    ):
        """Initialize service with database session and stats hook."""
        self.db = db
        self.hook = hook or ConsultationMutationHook.for_session(db, cache_manager=cache_manager)

    async def create_consultation(self, data: ConsultationCreate) -> ConsultationResponse:
        """
        Record a consultation.

        Args:
            data: Consultation data

        Returns:
            Created consultation

        Raises:
            ConflictException: If the appointment already has a consultation
        """
        values = data.model_dump(exclude_none=True)
        values["status"] = data.status.value

        stmt = insert(consultations).values(**values).returning(consultations)
        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException("Consultation already exists for this appointment") from e

        consultation = ConsultationResponse.model_validate(dict(row._mapping))
        await self.hook.after_create(consultation)
        return consultation

    async def get_consultation(self, consultation_id: UUID) -> ConsultationResponse:
        """
        Get consultation by ID.

        Raises:
            NotFoundException: If consultation not found
        """
        stmt = select(consultations).where(consultations.c.id == consultation_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()

        if not row:
            raise NotFoundException("Consultation not found")

        return ConsultationResponse.model_validate(dict(row._mapping))

    async def find_by_appointment(self, appointment_id: UUID) -> ConsultationResponse | None:
        """Get the consultation recorded for an appointment, if any."""
        stmt = select(consultations).where(consultations.c.appointment_id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        return ConsultationResponse.model_validate(dict(row._mapping)) if row else None

    async def update_consultation_status(
        self,
        consultation_id: UUID,
        data: ConsultationStatusUpdate,
    ) -> ConsultationResponse:
        """
        Change a consultation's status.

        Args:
            consultation_id: Consultation ID
            data: New status

        Returns:
            Updated consultation

        Raises:
            NotFoundException: If consultation not found
        """
        before = await self.get_consultation(consultation_id)
        if before.status == data.status:
            return before

        # Only move from the status we read; a concurrent change wins
        stmt = (
            update(consultations)
            .where(
                consultations.c.id == consultation_id,
                consultations.c.status == before.status.value,
            )
            .values(status=data.status.value, updated_at=utc_now())
            .returning(consultations)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()

        if not row:
            logger.info(
                "consultation_status_superseded",
                consultation_id=str(consultation_id),
                expected=before.status.value,
                requested=data.status.value,
            )
            return await self.get_consultation(consultation_id)

        after = ConsultationResponse.model_validate(dict(row._mapping))
        await self.hook.after_status_change(before, after)
        return after

    async def delete_consultation(self, consultation_id: UUID) -> ConsultationResponse:
        """
        Permanently delete a consultation.

        Returns:
            The deleted consultation

        Raises:
            NotFoundException: If consultation not found
        """
        stmt = (
            delete(consultations)
            .where(consultations.c.id == consultation_id)
            .returning(consultations)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()

        if not row:
            raise NotFoundException("Consultation not found")

        deleted = ConsultationResponse.model_validate(dict(row._mapping))
        await self.hook.after_delete(deleted)
        return deleted
