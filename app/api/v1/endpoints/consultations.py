"""Consultation endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from app.dependencies import ConsultationServiceDep
from app.schemas.consultations import (
    ConsultationCreate,
    ConsultationResponse,
    ConsultationStatusUpdate,
)

router = APIRouter()


@router.post(
    "/",
    response_model=ConsultationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record consultation",
)
async def create_consultation(
    data: ConsultationCreate,
    service: ConsultationServiceDep,
) -> ConsultationResponse:
    """Record a consultation. Completed consultations count toward the doctor's total."""
    return await service.create_consultation(data)


@router.get("/{consultation_id}", response_model=ConsultationResponse, summary="Get consultation")
async def get_consultation(
    consultation_id: UUID,
    service: ConsultationServiceDep,
) -> ConsultationResponse:
    """Get a consultation by ID."""
    return await service.get_consultation(consultation_id)


@router.patch(
    "/{consultation_id}/status",
    response_model=ConsultationResponse,
    summary="Change consultation status",
)
async def update_consultation_status(
    consultation_id: UUID,
    data: ConsultationStatusUpdate,
    service: ConsultationServiceDep,
) -> ConsultationResponse:
    """Change a consultation's status, moving it in or out of the doctor's total."""
    return await service.update_consultation_status(consultation_id, data)


@router.delete(
    "/{consultation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete consultation",
)
async def delete_consultation(
    consultation_id: UUID,
    service: ConsultationServiceDep,
) -> None:
    """Permanently delete a consultation."""
    await service.delete_consultation(consultation_id)
