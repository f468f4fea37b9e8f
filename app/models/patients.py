"""Patient model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    MetaData,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy import Uuid as UUID

metadata = MetaData()

patients = Table(
    "patients",
    metadata,
    Column("id", UUID, primary_key=True, default=uuid4),
    Column("user_id", UUID, nullable=False, unique=True, index=True),
    Column("phone_number", String(20)),
    # Personal information
    Column("date_of_birth", Date),
    Column("gender", String(20)),
    Column("city", String(100)),
    Column("street", Text),
    Column("profile_image_url", Text),
    # Medical information (JSON for flexibility)
    Column("blood_group", String(3)),
    Column("allergies", JSON),
    Column("chronic_diseases", JSON),
    Column("medications", JSON),
    Column("medical_notes", Text),
    # Emergency contact
    Column("emergency_contact_name", Text),
    Column("emergency_contact_phone", String(20)),
    Column("emergency_contact_relation", String(50)),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "gender IN ('male', 'female', 'other', 'prefer not to say')",
        name="patients_gender_check",
    ),
    CheckConstraint(
        "blood_group IN ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')",
        name="patients_blood_group_check",
    ),
)
