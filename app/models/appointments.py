"""Appointments table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy import Uuid as UUID

# Metadata for all tables
metadata = MetaData()

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", UUID, primary_key=True, default=uuid4),
    # Ownership / references
    Column("patient_id", UUID, nullable=False, index=True),
    Column("doctor_id", UUID, nullable=False, index=True),
    # Schedule
    Column("appointment_at", DateTime(timezone=True), nullable=False),
    Column("time_slot", String(50), nullable=False),
    # Status management
    Column("status", Text, nullable=False, server_default="pending"),
    Column("consultation_type", Text, nullable=False, server_default="video"),
    # Details
    Column("reason_for_visit", Text, nullable=False),
    Column("doctor_notes", Text, nullable=True),
    # Fee snapshot taken from the doctor profile at booking time
    Column("consultation_fee", Numeric(10, 2), nullable=True),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("cancelled_at", DateTime(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('pending', 'approved', 'rescheduled', 'cancelled', 'completed')",
        name="appointments_status_check",
    ),
    CheckConstraint(
        "consultation_type IN ('video', 'audio', 'chat')",
        name="appointments_consultation_type_check",
    ),
)
