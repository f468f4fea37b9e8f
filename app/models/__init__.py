"""Database models."""

from sqlalchemy import MetaData

from app.models.appointments import appointments
from app.models.consultations import consultations
from app.models.doctors import doctors
from app.models.patients import patients
from app.models.prescriptions import prescriptions
from app.models.reviews import reviews

__all__ = [
    "all_metadata",
    "appointments",
    "consultations",
    "doctors",
    "patients",
    "prescriptions",
    "reviews",
]


def all_metadata() -> MetaData:
    """Combine every table into a single MetaData for create_all/drop_all."""
    metadata = MetaData()
    for table in (appointments, consultations, doctors, patients, prescriptions, reviews):
        table.to_metadata(metadata)
    return metadata
