"""Consultations table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    Table,
    Text,
    func,
)
from sqlalchemy import Uuid as UUID

metadata = MetaData()

consultations = Table(
    "consultations",
    metadata,
    Column("id", UUID, primary_key=True, default=uuid4),
    Column("doctor_id", UUID, nullable=False, index=True),
    Column("patient_id", UUID, nullable=False, index=True),
    # One consultation per appointment
    Column("appointment_id", UUID, nullable=False, unique=True),
    Column("prescription_id", UUID, nullable=True),
    Column("status", Text, nullable=False, server_default="completed"),
    Column("consultation_date", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("duration_minutes", Integer, nullable=True),
    Column("fees", Numeric(10, 2), nullable=False),
    Column("notes", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    CheckConstraint(
        "status IN ('completed', 'cancelled', 'no-show')",
        name="consultations_status_check",
    ),
    CheckConstraint("fees >= 0", name="consultations_fees_check"),
    CheckConstraint("duration_minutes >= 0", name="consultations_duration_check"),
    Index("ix_consultations_doctor_status_date", "doctor_id", "status", "consultation_date"),
)
