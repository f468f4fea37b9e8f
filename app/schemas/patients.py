"""Patient schemas for request/response validation."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class PatientGender(str, Enum):
    """Patient gender enumeration."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNDISCLOSED = "prefer not to say"


class BloodGroup(str, Enum):
    """ABO/Rh blood groups."""

    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


PHONE_PATTERN = r"^[0-9]{10,15}$"


class PatientContactFields(BaseModel):
    """Personal and emergency contact fields."""

    phone_number: str | None = Field(None, pattern=PHONE_PATTERN)
    date_of_birth: date | None = None
    gender: PatientGender | None = None
    city: str | None = Field(None, min_length=2, max_length=100)
    street: str | None = Field(None, min_length=2)
    profile_image_url: str | None = None
    emergency_contact_name: str | None = Field(None, min_length=2)
    emergency_contact_phone: str | None = Field(None, min_length=10, max_length=20)
    emergency_contact_relation: str | None = Field(None, min_length=2, max_length=50)


class PatientBase(PatientContactFields):
    """Base schema for patient profile fields."""

    blood_group: BloodGroup | None = None
    allergies: list[str] | None = None
    chronic_diseases: list[str] | None = None
    medications: list[str] | None = None
    medical_notes: str | None = None


class PatientCreate(PatientBase):
    """Schema for creating a patient profile."""

    user_id: UUID


class PatientUpdate(PatientContactFields):
    """
    Schema for updating a patient profile.

    Medical information is recorded at profile creation and not editable here.
    """


class PatientResponse(PatientBase):
    """Patient response schema."""

    id: UUID
    user_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
