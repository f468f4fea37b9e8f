"""Patient profile endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.core.exceptions import NotFoundException
from app.dependencies import DatabaseSession, PatientServiceDep
from app.schemas.patients import PatientCreate, PatientResponse, PatientUpdate

router = APIRouter()


@router.post("/", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    patient_data: PatientCreate,
    db: DatabaseSession,
    patient_service: PatientServiceDep,
):
    """
    Create a patient profile.

    - **user_id**: Account the profile belongs to (one profile per user)
    - **phone_number**, **city**, **street**: Contact details
    - **blood_group**, **allergies**, **chronic_diseases**, **medications**: Medical history
    - **emergency_contact_***: Who to call in an emergency
    """
    return await patient_service.create_patient(db, patient_data)


@router.get("/user/{user_id}", response_model=PatientResponse)
async def get_patient_by_user(
    user_id: UUID,
    db: DatabaseSession,
    patient_service: PatientServiceDep,
):
    """Get the patient profile belonging to a user."""
    patient = await patient_service.get_patient_by_user_id(db, user_id)
    if not patient:
        raise NotFoundException("Patient profile not found")
    return patient


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: UUID,
    db: DatabaseSession,
    patient_service: PatientServiceDep,
):
    """Get a patient profile."""
    patient = await patient_service.get_patient_by_id(db, patient_id)
    if not patient:
        raise NotFoundException("Patient not found")
    return patient


@router.patch("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: UUID,
    patient_data: PatientUpdate,
    db: DatabaseSession,
    patient_service: PatientServiceDep,
):
    """Update contact details. Medical history is fixed at creation."""
    patient = await patient_service.update_patient(db, patient_id, patient_data)
    if not patient:
        raise NotFoundException("Patient not found")
    return patient


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: UUID,
    db: DatabaseSession,
    patient_service: PatientServiceDep,
) -> None:
    """Delete a patient profile."""
    if not await patient_service.delete_patient(db, patient_id):
        raise NotFoundException("Patient not found")
