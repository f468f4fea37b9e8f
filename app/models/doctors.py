"""Doctor model definition using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    false,
    func,
    text,
    true,
)
from sqlalchemy import Uuid as UUID

metadata = MetaData()

doctors = Table(
    "doctors",
    metadata,
    Column("id", UUID, primary_key=True, default=uuid4),
    Column("user_id", UUID, nullable=False, unique=True, index=True),
    # Profile
    Column("gender", String(10), nullable=False),
    Column("specialization", String(200), nullable=False, index=True),
    Column("qualifications", Text, nullable=False),
    Column("experience_years", Integer, nullable=False),
    Column("city", String(100), nullable=False, index=True),
    Column("address", Text),
    Column("consultation_fee", Numeric(10, 2), nullable=False),
    Column("availability_slots", JSON),
    Column("doctor_image_url", Text),
    Column("certificate_image_url", Text),
    Column("is_verified", Boolean, nullable=False, server_default=false(), index=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    # Cached statistics, written only by DoctorStatsStore
    Column("number_of_consultations", Integer, nullable=False, server_default=text("0")),
    Column("rating", Numeric(2, 1), nullable=False, server_default=text("0")),
    Column("total_reviews", Integer, nullable=False, server_default=text("0")),
    Column("stats_last_updated", DateTime(timezone=True), server_default=func.now()),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("gender IN ('male', 'female', 'other')", name="doctors_gender_check"),
    CheckConstraint("number_of_consultations >= 0", name="doctors_consultations_check"),
    CheckConstraint("rating >= 0 AND rating <= 5", name="doctors_rating_check"),
    CheckConstraint("total_reviews >= 0", name="doctors_total_reviews_check"),
)
