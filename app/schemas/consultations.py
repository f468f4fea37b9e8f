"""Consultation schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer


class ConsultationStatus(str, Enum):
    """Consultation status enumeration."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class ConsultationCreate(BaseModel):
    """Schema for recording a consultation."""

    doctor_id: UUID
    patient_id: UUID
    appointment_id: UUID
    prescription_id: UUID | None = None
    status: ConsultationStatus = ConsultationStatus.COMPLETED
    consultation_date: datetime | None = None
    duration_minutes: int | None = Field(None, ge=0)
    fees: Decimal = Field(..., ge=0, decimal_places=2)
    notes: str | None = Field(None, max_length=2000)


class ConsultationStatusUpdate(BaseModel):
    """Schema for changing a consultation's status."""

    status: ConsultationStatus


class ConsultationResponse(BaseModel):
    """Schema for consultation response."""

    id: UUID
    doctor_id: UUID
    patient_id: UUID
    appointment_id: UUID
    prescription_id: UUID | None = None
    status: ConsultationStatus
    consultation_date: datetime
    duration_minutes: int | None = None
    fees: Decimal
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def is_completed(self) -> bool:
        """Whether this consultation counts toward the doctor's total."""
        return self.status == ConsultationStatus.COMPLETED

    @field_serializer("fees", when_used="json")
    def serialize_fees(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)
