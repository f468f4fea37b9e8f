"""Prescription schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class CascadeOutcome(str, Enum):
    """Result of deriving a consultation from a new prescription."""

    CREATED = "created"
    DUPLICATE = "duplicate"
    FAILED = "failed"


class Medicine(BaseModel):
    """A single prescribed medicine."""

    name: str = Field(..., min_length=1, max_length=200)
    dosage: str = Field(..., min_length=1, max_length=200)
    duration: str = Field(..., min_length=1, max_length=200)
    instructions: str | None = Field(None, max_length=500)


class PrescriptionCreate(BaseModel):
    """Schema for writing a prescription."""

    appointment_id: UUID
    doctor_id: UUID
    patient_id: UUID
    medicines: list[Medicine] = Field(default_factory=list)
    diagnosis: str = Field(..., min_length=1)
    notes: str | None = None
    lab_tests: list[str] | None = None
    follow_up_date: date | None = None


class PrescriptionResponse(BaseModel):
    """Schema for prescription response."""

    id: UUID
    appointment_id: UUID
    doctor_id: UUID
    patient_id: UUID
    medicines: list[Medicine]
    diagnosis: str
    notes: str | None = None
    lab_tests: list[str] | None = None
    follow_up_date: date | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PrescriptionCreateResponse(PrescriptionResponse):
    """Created prescription together with the consultation cascade result."""

    consultation: CascadeOutcome
