"""Prescriptions table model using SQLAlchemy Core."""

from uuid import uuid4

from sqlalchemy import JSON, Column, Date, DateTime, MetaData, Table, Text, func
from sqlalchemy import Uuid as UUID

metadata = MetaData()

prescriptions = Table(
    "prescriptions",
    metadata,
    Column("id", UUID, primary_key=True, default=uuid4),
    # One prescription per appointment
    Column("appointment_id", UUID, nullable=False, unique=True),
    Column("doctor_id", UUID, nullable=False, index=True),
    Column("patient_id", UUID, nullable=False, index=True),
    # [{"name", "dosage", "duration", "instructions"}]
    Column("medicines", JSON, nullable=False),
    Column("diagnosis", Text, nullable=False),
    Column("notes", Text, nullable=True),
    Column("lab_tests", JSON, nullable=True),
    Column("follow_up_date", Date, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
