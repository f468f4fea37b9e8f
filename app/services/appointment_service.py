"""Appointment service for business logic."""

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utc_now
from app.core.exceptions import LookupMissing, NotFoundException
from app.models.appointments import appointments
from app.models.doctors import doctors
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
)


class AppointmentService:
    """Service for managing appointments."""

    def __init__(self, db: AsyncSession):
        """Initialize service with database session."""
        self.db = db

    async def create_appointment(self, data: AppointmentCreate) -> AppointmentResponse:
        """
        Book a new appointment.

        Args:
            data: Appointment creation data

        Returns:
            Created appointment

        Raises:
            NotFoundException: If the doctor does not exist
        """
        fee_stmt = select(doctors.c.consultation_fee).where(doctors.c.id == data.doctor_id)
        fee_result = await self.db.execute(fee_stmt)
        doctor_row = fee_result.fetchone()

        if not doctor_row:
            raise NotFoundException("Doctor not found")

        values = {
            "patient_id": data.patient_id,
            "doctor_id": data.doctor_id,
            "appointment_at": data.appointment_at,
            "time_slot": data.time_slot,
            "consultation_type": data.consultation_type.value,
            "reason_for_visit": data.reason_for_visit,
            "status": AppointmentStatus.PENDING.value,
            # Snapshot the doctor's fee unless one was agreed explicitly
            "consultation_fee": (
                data.consultation_fee
                if data.consultation_fee is not None
                else doctor_row.consultation_fee
            ),
        }

        stmt = insert(appointments).values(**values).returning(appointments)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()

        return AppointmentResponse.model_validate(dict(row._mapping))

    async def get_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
        """
        stmt = select(appointments).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()

        if not row:
            raise NotFoundException("Appointment not found")

        return AppointmentResponse.model_validate(dict(row._mapping))

    async def get_consultation_fee(self, appointment_id: UUID) -> Decimal:
        """
        Fee agreed for an appointment.

        Raises:
            LookupMissing: If the appointment does not exist or has no fee
        """
        stmt = select(appointments.c.consultation_fee).where(appointments.c.id == appointment_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()

        if not row:
            raise LookupMissing(f"Appointment {appointment_id} not found")
        if row.consultation_fee is None:
            raise LookupMissing(f"Appointment {appointment_id} has no consultation fee")

        return Decimal(row.consultation_fee)

    async def update_appointment_status(
        self,
        appointment_id: UUID,
        data: AppointmentStatusUpdate,
    ) -> AppointmentResponse:
        """
        Update appointment status.

        Args:
            appointment_id: Appointment ID
            data: Status update data

        Returns:
            Updated appointment
        """
        await self.get_appointment(appointment_id)

        now = utc_now()
        update_values: dict[str, Any] = {
            "status": data.status.value,
            "updated_at": now,
        }

        if data.doctor_notes:
            update_values["doctor_notes"] = data.doctor_notes

        if data.status == AppointmentStatus.CANCELLED:
            update_values["cancelled_at"] = now

        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(**update_values)
            .returning(appointments)
        )

        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()

        return AppointmentResponse.model_validate(dict(row._mapping))
