"""Prescription service for business logic."""

from uuid import UUID

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException
from app.core.redis_client import CacheManager
from app.models.prescriptions import prescriptions
from app.schemas.prescriptions import (
    PrescriptionCreate,
    PrescriptionCreateResponse,
    PrescriptionResponse,
)
from app.services.appointment_service import AppointmentService
from app.services.consultation_service import ConsultationService
from app.services.stats_hooks import PrescriptionCascade


class PrescriptionService:
    """Service for prescriptions written at the end of an appointment."""

    def __init__(
        self,
        db: AsyncSession,
        cascade: PrescriptionCascade | None = None,
        cache_manager: CacheManager | None = None,
    ):
        """Initialize service with database session and consultation cascade."""
        self.db = db
        self.cascade = cascade or PrescriptionCascade(
            db,
            consultations=ConsultationService(db, cache_manager=cache_manager),
            appointment_fees=AppointmentService(db),
        )

    async def create_prescription(self, data: PrescriptionCreate) -> PrescriptionCreateResponse:
        """
        Write a prescription and derive its consultation.

        Args:
            data: Prescription data

        Returns:
            Created prescription with the outcome of the consultation cascade

        Raises:
            ConflictException: If the appointment already has a prescription
        """
        values = data.model_dump(mode="json", exclude={"follow_up_date"})
        values["appointment_id"] = data.appointment_id
        values["doctor_id"] = data.doctor_id
        values["patient_id"] = data.patient_id
        values["follow_up_date"] = data.follow_up_date

        stmt = insert(prescriptions).values(**values).returning(prescriptions)
        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException("Prescription already exists for this appointment") from e

        prescription = PrescriptionResponse.model_validate(dict(row._mapping))
        outcome = await self.cascade.after_create(prescription)

        return PrescriptionCreateResponse(
            **prescription.model_dump(),
            consultation=outcome,
        )

    async def get_prescription(self, prescription_id: UUID) -> PrescriptionResponse:
        """
        Get prescription by ID.

        Raises:
            NotFoundException: If prescription not found
        """
        stmt = select(prescriptions).where(prescriptions.c.id == prescription_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()

        if not row:
            raise NotFoundException("Prescription not found")

        return PrescriptionResponse.model_validate(dict(row._mapping))
