"""Doctor schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_serializer

# ============================================================================
# Doctor Profile Schemas
# ============================================================================


class Gender(str, Enum):
    """Doctor gender enumeration."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Weekday(str, Enum):
    """Days a doctor can offer availability slots on."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


class AvailabilitySlot(BaseModel):
    """A weekly availability window."""

    day: Weekday
    start_time: str = Field(..., min_length=1, max_length=20)
    end_time: str = Field(..., min_length=1, max_length=20)
    is_available: bool = True


class DoctorBase(BaseModel):
    """Base schema for doctor profile fields."""

    gender: Gender
    specialization: str = Field(..., min_length=1, max_length=200)
    qualifications: str = Field(..., min_length=1)
    experience_years: int = Field(..., ge=0)
    city: str = Field(..., min_length=1, max_length=100)
    address: str | None = None
    consultation_fee: Decimal = Field(..., ge=0, decimal_places=2)
    availability_slots: list[AvailabilitySlot] | None = None
    doctor_image_url: str | None = None
    certificate_image_url: str | None = None


class DoctorCreate(DoctorBase):
    """Schema for creating a doctor profile."""

    user_id: UUID


class DoctorUpdate(BaseModel):
    """
    Schema for updating a doctor profile.

    Statistics columns are deliberately absent: they are derived values.
    """

    gender: Gender | None = None
    specialization: str | None = Field(None, min_length=1, max_length=200)
    qualifications: str | None = Field(None, min_length=1)
    experience_years: int | None = Field(None, ge=0)
    city: str | None = Field(None, min_length=1, max_length=100)
    address: str | None = None
    consultation_fee: Decimal | None = Field(None, ge=0, decimal_places=2)
    availability_slots: list[AvailabilitySlot] | None = None
    doctor_image_url: str | None = None
    certificate_image_url: str | None = None


class DoctorResponse(DoctorBase):
    """Doctor response schema."""

    id: UUID
    user_id: UUID
    is_verified: bool
    is_active: bool
    number_of_consultations: int = 0
    rating: Decimal = Decimal("0")
    total_reviews: int = 0
    stats_last_updated: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_serializer("consultation_fee", "rating", when_used="json")
    def serialize_decimal(self, value: Decimal | None) -> float | None:
        """Serialize Decimal to float for JSON."""
        return float(value) if value is not None else None


# ============================================================================
# Doctor Statistics Schemas
# ============================================================================


class RatingAggregate(BaseModel):
    """Average rating and review count for one doctor."""

    average_rating: Decimal = Decimal("0")
    review_count: int = 0


class DoctorStatsSnapshot(BaseModel):
    """Statistics computed from the current consultations and reviews."""

    consultation_count: int = 0
    average_rating: Decimal = Decimal("0")
    review_count: int = 0

    @field_serializer("average_rating", when_used="json")
    def serialize_rating(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)


class DoctorStatsResponse(BaseModel):
    """Cached statistics stored on the doctor record."""

    doctor_id: UUID
    number_of_consultations: int
    rating: Decimal
    total_reviews: int
    stats_last_updated: datetime | None = None

    @field_serializer("rating", when_used="json")
    def serialize_rating(self, value: Decimal) -> float:
        """Serialize Decimal to float for JSON."""
        return float(value)
