"""Appointment schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "pending"
    APPROVED = "approved"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ConsultationType(str, Enum):
    """How the consultation takes place."""

    VIDEO = "video"
    AUDIO = "audio"
    CHAT = "chat"


class AppointmentBase(BaseModel):
    """Base appointment schema with common fields."""

    appointment_at: datetime
    time_slot: str = Field(..., min_length=1, max_length=50)
    consultation_type: ConsultationType = ConsultationType.VIDEO
    reason_for_visit: str = Field(..., min_length=1, max_length=500)


class AppointmentCreate(AppointmentBase):
    """
    Schema for creating a new appointment.

    When ``consultation_fee`` is omitted the doctor's current fee is used.
    """

    patient_id: UUID
    doctor_id: UUID
    consultation_fee: Decimal | None = Field(None, ge=0, decimal_places=2)


class AppointmentStatusUpdate(BaseModel):
    """Schema for updating appointment status."""

    status: AppointmentStatus
    doctor_notes: str | None = Field(None, max_length=1000)


class AppointmentResponse(AppointmentBase):
    """Schema for appointment response."""

    id: UUID
    patient_id: UUID
    doctor_id: UUID
    status: AppointmentStatus
    doctor_notes: str | None = None
    consultation_fee: Decimal | None = None
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_serializer("consultation_fee", when_used="json")
    def serialize_fee(self, value: Decimal | None) -> float | None:
        """Serialize Decimal to float for JSON."""
        return float(value) if value is not None else None
