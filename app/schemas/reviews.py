"""Review schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ReviewBase(BaseModel):
    """Fields a patient can set on a review."""

    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=500)
    punctuality: int | None = Field(None, ge=1, le=5)
    communication: int | None = Field(None, ge=1, le=5)
    treatment: int | None = Field(None, ge=1, le=5)


class ReviewCreate(ReviewBase):
    """Schema for creating a review."""

    doctor_id: UUID
    patient_id: UUID
    appointment_id: UUID


class ReviewUpdate(BaseModel):
    """
    Schema for updating a review.

    The doctor, patient and appointment references are fixed at creation.
    """

    rating: int | None = Field(None, ge=1, le=5)
    comment: str | None = Field(None, max_length=500)
    punctuality: int | None = Field(None, ge=1, le=5)
    communication: int | None = Field(None, ge=1, le=5)
    treatment: int | None = Field(None, ge=1, le=5)


class ReviewResponse(ReviewBase):
    """Schema for review response."""

    id: UUID
    doctor_id: UUID
    patient_id: UUID
    appointment_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ReviewListResponse(BaseModel):
    """Schema for paginated review list response."""

    total: int
    page: int
    page_size: int
    items: list[ReviewResponse]
