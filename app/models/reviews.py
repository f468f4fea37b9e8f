"""Reviews table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    func,
)
from sqlalchemy import Uuid as UUID

metadata = MetaData()

reviews = Table(
    "reviews",
    metadata,
    Column("id", UUID, primary_key=True, default=uuid4),
    Column("doctor_id", UUID, nullable=False, index=True),
    Column("patient_id", UUID, nullable=False, index=True),
    # One review per appointment
    Column("appointment_id", UUID, nullable=False, unique=True),
    Column("rating", Integer, nullable=False, index=True),
    Column("comment", String(500), nullable=True),
    # Optional detailed ratings
    Column("punctuality", Integer, nullable=True),
    Column("communication", Integer, nullable=True),
    Column("treatment", Integer, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint("rating BETWEEN 1 AND 5", name="reviews_rating_check"),
    CheckConstraint("punctuality BETWEEN 1 AND 5", name="reviews_punctuality_check"),
    CheckConstraint("communication BETWEEN 1 AND 5", name="reviews_communication_check"),
    CheckConstraint("treatment BETWEEN 1 AND 5", name="reviews_treatment_check"),
)
