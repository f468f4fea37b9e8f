"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.redis_client import CacheManager, get_redis_client
from app.database import get_db
from app.services.consultation_service import ConsultationService
from app.services.doctor_service import DoctorService
from app.services.patient_service import PatientService
from app.services.prescription_service import PrescriptionService
from app.services.review_service import ReviewService


def get_cache_manager() -> CacheManager | None:
    """Cache manager backed by the shared Redis client."""
    return CacheManager(get_redis_client())


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
Cache = Annotated[CacheManager | None, Depends(get_cache_manager)]


def get_doctor_service(cache_manager: Cache) -> DoctorService:
    """Get doctor service instance."""
    return DoctorService(cache_manager=cache_manager)


def get_patient_service() -> PatientService:
    """Get patient service instance."""
    return PatientService()


def get_review_service(db: DatabaseSession, cache_manager: Cache) -> ReviewService:
    """Review service wired to the rating hook."""
    return ReviewService(db, cache_manager=cache_manager)


def get_consultation_service(db: DatabaseSession, cache_manager: Cache) -> ConsultationService:
    """Consultation service wired to the consultation counter hook."""
    return ConsultationService(db, cache_manager=cache_manager)


def get_prescription_service(db: DatabaseSession, cache_manager: Cache) -> PrescriptionService:
    """Prescription service wired to the consultation cascade."""
    return PrescriptionService(db, cache_manager=cache_manager)


DoctorServiceDep = Annotated[DoctorService, Depends(get_doctor_service)]
PatientServiceDep = Annotated[PatientService, Depends(get_patient_service)]
ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]
ConsultationServiceDep = Annotated[ConsultationService, Depends(get_consultation_service)]
PrescriptionServiceDep = Annotated[PrescriptionService, Depends(get_prescription_service)]
