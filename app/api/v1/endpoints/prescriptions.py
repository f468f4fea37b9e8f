"""Prescription endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.dependencies import PrescriptionServiceDep
from app.schemas.prescriptions import (
    PrescriptionCreate,
    PrescriptionCreateResponse,
    PrescriptionResponse,
)

router = APIRouter()


@router.post(
    "/",
    response_model=PrescriptionCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Write prescription",
)
async def create_prescription(
    data: PrescriptionCreate,
    service: PrescriptionServiceDep,
) -> PrescriptionCreateResponse:
    """
    Write the prescription for an appointment.

    A completed consultation is recorded for the appointment if it does not
    have one yet; ``consultation`` in the response says what happened.
    """
    return await service.create_prescription(data)


@router.get(
    "/{prescription_id}",
    response_model=PrescriptionResponse,
    summary="Get prescription",
)
async def get_prescription(
    prescription_id: UUID,
    service: PrescriptionServiceDep,
) -> PrescriptionResponse:
    """Get a prescription by ID."""
    return await service.get_prescription(prescription_id)
