"""Patient service for business logic."""

from uuid import UUID

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, utc_now
from app.core.exceptions import BadRequestException, ConflictException
from app.models.patients import patients
from app.schemas.patients import PatientCreate, PatientUpdate


class PatientService:
    """Service for patient profiles."""

    def __init__(self, clock: Clock = utc_now):
        """Initialize service with the clock used for update timestamps."""
        self.clock = clock

    async def create_patient(self, db: AsyncSession, patient_data: PatientCreate) -> dict:
        """
        Create a patient profile.

        Raises:
            ConflictException: If the user already has a patient profile
        """
        existing = await self.get_patient_by_user_id(db, patient_data.user_id)
        if existing:
            raise ConflictException("Patient profile already exists for this user")

        values = patient_data.model_dump(mode="json", exclude={"user_id", "date_of_birth"})
        values["user_id"] = patient_data.user_id
        values["date_of_birth"] = patient_data.date_of_birth

        query = insert(patients).values(**values).returning(patients)
        result = await db.execute(query)
        patient = result.mappings().first()
        await db.commit()

        if not patient:
            raise ValueError("Failed to create patient")

        return dict(patient)

    async def get_patient_by_id(self, db: AsyncSession, patient_id: UUID) -> dict | None:
        """Get patient by ID."""
        query = select(patients).where(patients.c.id == patient_id)
        result = await db.execute(query)
        patient = result.mappings().first()

        return dict(patient) if patient else None

    async def get_patient_by_user_id(self, db: AsyncSession, user_id: UUID) -> dict | None:
        """Get patient by user ID."""
        query = select(patients).where(patients.c.user_id == user_id)
        result = await db.execute(query)
        patient = result.mappings().first()

        return dict(patient) if patient else None

    async def update_patient(
        self, db: AsyncSession, patient_id: UUID, patient_data: PatientUpdate
    ) -> dict | None:
        """
        Update personal and emergency contact fields.

        Returns:
            Updated profile, or None if the patient does not exist

        Raises:
            BadRequestException: If no updatable field was supplied
        """
        update_values = patient_data.model_dump(
            mode="json", exclude_unset=True, exclude={"date_of_birth"}
        )
        if "date_of_birth" in patient_data.model_fields_set:
            update_values["date_of_birth"] = patient_data.date_of_birth

        if not update_values:
            raise BadRequestException("No valid fields provided for update")

        update_values["updated_at"] = self.clock()

        query = (
            update(patients)
            .where(patients.c.id == patient_id)
            .values(**update_values)
            .returning(patients)
        )
        result = await db.execute(query)
        updated_patient = result.mappings().first()
        await db.commit()

        return dict(updated_patient) if updated_patient else None

    async def delete_patient(self, db: AsyncSession, patient_id: UUID) -> bool:
        """Delete a patient profile."""
        query = delete(patients).where(patients.c.id == patient_id).returning(patients.c.id)
        result = await db.execute(query)
        deleted = result.fetchone()
        await db.commit()

        return deleted is not None
