"""
Post-write hooks that keep doctor statistics in step with their sources.

The write services call these right after committing a review, consultation
or prescription. A hook never raises: the triggering write is already
committed, so failures are rolled back and handed to the error reporter,
leaving the statistics stale until the next hook run or an explicit refresh.
"""

from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Protocol, Self
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Clock, utc_now
from app.core.exceptions import AggregateUpdateFailed, ConflictException, LookupMissing
from app.core.redis_client import CacheManager
from app.core.reporting import ErrorReporter, StructlogErrorReporter
from app.schemas.consultations import (
    ConsultationCreate,
    ConsultationResponse,
    ConsultationStatus,
)
from app.schemas.prescriptions import CascadeOutcome, PrescriptionResponse
from app.schemas.reviews import ReviewResponse
from app.services.stats_service import AggregateRecalculator, DoctorStatsStore

logger = structlog.get_logger()


class ConsultationWriter(Protocol):
    """What the prescription cascade needs from the consultation write path."""

    async def find_by_appointment(self, appointment_id: UUID) -> ConsultationResponse | None:
        """Existing consultation for an appointment, if any."""

    async def create_consultation(self, data: ConsultationCreate) -> ConsultationResponse:
        """Create a consultation and run its own post-write hook."""


class AppointmentFeeSource(Protocol):
    """Resolves the fee charged for an appointment."""

    async def get_consultation_fee(self, appointment_id: UUID) -> Decimal:
        """Fee for the appointment; raises LookupMissing if unknown."""


class DoctorStatsHook:
    """Shared failure handling for the statistics hooks."""

    name = "doctor_stats"

    def __init__(
        self,
        recalculator: AggregateRecalculator,
        store: DoctorStatsStore,
        reporter: ErrorReporter | None = None,
    ):
        """Initialize hook with its collaborators."""
        self.recalculator = recalculator
        self.store = store
        self.reporter = reporter or StructlogErrorReporter()

    @classmethod
    def for_session(
        cls,
        db: AsyncSession,
        cache_manager: CacheManager | None = None,
        clock: Clock = utc_now,
        reporter: ErrorReporter | None = None,
    ) -> Self:
        """Build a hook whose recalculator and store share one session."""
        return cls(
            AggregateRecalculator(db),
            DoctorStatsStore(db, clock=clock, cache_manager=cache_manager),
            reporter,
        )

    async def _guard(
        self,
        trigger: str,
        doctor_id: UUID,
        operation: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await operation()
        except Exception as exc:
            await self._discard()
            self.reporter.report(
                "aggregate_update_failed",
                AggregateUpdateFailed(
                    f"{self.name} hook could not update doctor statistics",
                    doctor_id=str(doctor_id),
                ),
                cause=exc,
                hook=self.name,
                trigger=trigger,
                doctor_id=str(doctor_id),
            )

    async def _discard(self) -> None:
        try:
            await self.store.discard()
        except Exception as exc:
            logger.warning("doctor_stats_rollback_failed", hook=self.name, error=str(exc))


class ReviewMutationHook(DoctorStatsHook):
    """
    Recomputes a doctor's rating after any review write.

    Always a full recompute over the doctor's current reviews, since updates
    and deletes move the mean in either direction.
    """

    name = "review_mutation"

    async def after_create(self, review: ReviewResponse) -> None:
        """Run after a review is inserted."""
        await self._refresh_rating(review.doctor_id, "review_created")

    async def after_update(self, review: ReviewResponse) -> None:
        """Run after a review is modified."""
        await self._refresh_rating(review.doctor_id, "review_updated")

    async def after_delete(self, review: ReviewResponse) -> None:
        """Run after a review row was actually removed."""
        await self._refresh_rating(review.doctor_id, "review_deleted")

    async def _refresh_rating(self, doctor_id: UUID, trigger: str) -> None:
        async def operation() -> None:
            aggregate = await self.recalculator.recompute_rating(doctor_id)
            await self.store.write_rating(doctor_id, aggregate)
            logger.info(
                "doctor_rating_recomputed",
                doctor_id=str(doctor_id),
                trigger=trigger,
                rating=str(aggregate.average_rating),
                total_reviews=aggregate.review_count,
            )

        await self._guard(trigger, doctor_id, operation)


class ConsultationMutationHook(DoctorStatsHook):
    """Keeps number_of_consultations in step, one event at a time."""

    name = "consultation_mutation"

    async def after_create(self, consultation: ConsultationResponse) -> None:
        """Count a new completed consultation."""
        if consultation.is_completed:
            await self._adjust(consultation.doctor_id, 1, "consultation_created")

    async def after_delete(self, consultation: ConsultationResponse) -> None:
        """Uncount a removed completed consultation."""
        if consultation.is_completed:
            await self._adjust(consultation.doctor_id, -1, "consultation_deleted")

    async def after_status_change(
        self,
        before: ConsultationResponse,
        after: ConsultationResponse,
    ) -> None:
        """Count or uncount a consultation moving into or out of completed."""
        delta = int(after.is_completed) - int(before.is_completed)
        if delta:
            await self._adjust(after.doctor_id, delta, "consultation_status_changed")

    async def _adjust(self, doctor_id: UUID, delta: int, trigger: str) -> None:
        async def operation() -> None:
            await self.store.adjust_consultation_count(doctor_id, delta)
            logger.info(
                "consultation_count_adjusted",
                doctor_id=str(doctor_id),
                trigger=trigger,
                delta=delta,
            )

        await self._guard(trigger, doctor_id, operation)


class PrescriptionCascade:
    """Derives the consultation record for a newly written prescription."""

    name = "prescription_cascade"

    def __init__(
        self,
        db: AsyncSession,
        consultations: ConsultationWriter,
        appointment_fees: AppointmentFeeSource,
        reporter: ErrorReporter | None = None,
    ):
        """Initialize cascade with its collaborators."""
        self.db = db
        self.consultations = consultations
        self.appointment_fees = appointment_fees
        self.reporter = reporter or StructlogErrorReporter()

    async def after_create(self, prescription: PrescriptionResponse) -> CascadeOutcome:
        """
        Ensure exactly one consultation exists for the prescription's appointment.

        Args:
            prescription: The committed prescription

        Returns:
            CREATED if a consultation was written, DUPLICATE if one already
            existed, FAILED if the lookup or insert failed
        """
        appointment_id = prescription.appointment_id
        try:
            existing = await self.consultations.find_by_appointment(appointment_id)
            if existing is not None:
                logger.info(
                    "consultation_cascade_skipped",
                    appointment_id=str(appointment_id),
                    consultation_id=str(existing.id),
                )
                return CascadeOutcome.DUPLICATE

            fee = await self._derive_fee(appointment_id)
            consultation = await self.consultations.create_consultation(
                ConsultationCreate(
                    doctor_id=prescription.doctor_id,
                    patient_id=prescription.patient_id,
                    appointment_id=appointment_id,
                    prescription_id=prescription.id,
                    status=ConsultationStatus.COMPLETED,
                    fees=fee,
                )
            )
        except ConflictException:
            # Another writer created it between the lookup and the insert
            logger.info(
                "consultation_cascade_skipped",
                appointment_id=str(appointment_id),
                reason="created_concurrently",
            )
            return CascadeOutcome.DUPLICATE
        except Exception as exc:
            await self._discard()
            self.reporter.report(
                "consultation_cascade_failed",
                AggregateUpdateFailed(
                    "Could not create consultation for prescription",
                    doctor_id=str(prescription.doctor_id),
                ),
                cause=exc,
                hook=self.name,
                prescription_id=str(prescription.id),
                appointment_id=str(appointment_id),
            )
            return CascadeOutcome.FAILED

        logger.info(
            "consultation_cascade_created",
            appointment_id=str(appointment_id),
            consultation_id=str(consultation.id),
            fees=str(fee),
        )
        return CascadeOutcome.CREATED

    async def _derive_fee(self, appointment_id: UUID) -> Decimal:
        try:
            return await self.appointment_fees.get_consultation_fee(appointment_id)
        except LookupMissing as e:
            logger.warning(
                "consultation_fee_defaulted",
                appointment_id=str(appointment_id),
                reason=e.message,
            )
            return Decimal("0")

    async def _discard(self) -> None:
        try:
            await self.db.rollback()
        except Exception as exc:
            logger.warning("consultation_cascade_rollback_failed", error=str(exc))
