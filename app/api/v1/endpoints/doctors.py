"""Doctor profile and statistics endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.core.exceptions import NotFoundException
from app.dependencies import DatabaseSession, DoctorServiceDep
from app.schemas.doctors import (
    DoctorCreate,
    DoctorResponse,
    DoctorStatsResponse,
    DoctorStatsSnapshot,
    DoctorUpdate,
)

router = APIRouter()


# ============================================================================
# Doctor Profile Endpoints
# ============================================================================


@router.post("/", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def create_doctor(
    doctor_data: DoctorCreate,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
):
    """
    Create a doctor profile.

    - **user_id**: Account the profile belongs to (one profile per user)
    - **specialization**, **qualifications**, **experience_years**: Credentials
    - **city**, **address**: Practice location
    - **consultation_fee**: Default fee, copied onto new appointments
    - **availability_slots**: Weekly availability windows
    """
    return await doctor_service.create_doctor(db, doctor_data)


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: UUID,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
):
    """Get a doctor profile, including its cached statistics."""
    doctor = await doctor_service.get_doctor_by_id(db, doctor_id)
    if not doctor:
        raise NotFoundException("Doctor not found")
    return doctor


@router.patch("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: UUID,
    doctor_data: DoctorUpdate,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
):
    """Update doctor profile fields. Statistics cannot be set here."""
    doctor = await doctor_service.update_doctor(db, doctor_id, doctor_data)
    if not doctor:
        raise NotFoundException("Doctor not found")
    return doctor


@router.delete("/{doctor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_doctor(
    doctor_id: UUID,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
) -> None:
    """Delete a doctor profile."""
    if not await doctor_service.delete_doctor(db, doctor_id):
        raise NotFoundException("Doctor not found")


# ============================================================================
# Doctor Statistics Endpoints
# ============================================================================


@router.get("/{doctor_id}/stats", response_model=DoctorStatsResponse)
async def get_doctor_stats(
    doctor_id: str,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
) -> DoctorStatsResponse:
    """Cached consultation count, rating and review count."""
    return await doctor_service.get_stats(db, doctor_id)


@router.post("/{doctor_id}/stats/refresh", response_model=DoctorStatsSnapshot)
async def refresh_doctor_stats(
    doctor_id: str,
    db: DatabaseSession,
    doctor_service: DoctorServiceDep,
) -> DoctorStatsSnapshot:
    """
    Recompute the doctor's statistics from consultations and reviews.

    Safe to call repeatedly; repairs statistics left stale by a failed update.
    """
    return await doctor_service.refresh_stats(db, doctor_id)
