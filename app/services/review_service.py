"""Review service for business logic."""

from uuid import UUID

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utc_now
from app.core.exceptions import ConflictException, NotFoundException
from app.core.redis_client import CacheManager
from app.models.reviews import reviews
from app.schemas.reviews import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from app.services.stats_hooks import ReviewMutationHook


class ReviewService:
    """Service for patient reviews of doctors."""

    def __init__(
        self,
        db: AsyncSession,
        hook: ReviewMutationHook | None = None,
        cache_manager: CacheManager | None = None,
    ):
        """Initialize service with database session and stats hook."""
        self.db = db
        self.hook = hook or ReviewMutationHook.for_session(db, cache_manager=cache_manager)

    async def create_review(self, data: ReviewCreate) -> ReviewResponse:
        """
        Create a review and refresh the doctor's rating.

        Args:
            data: Review data

        Returns:
            Created review

        Raises:
            ConflictException: If the appointment was already reviewed
        """
        stmt = insert(reviews).values(**data.model_dump()).returning(reviews)
        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictException("Appointment has already been reviewed") from e

        review = ReviewResponse.model_validate(dict(row._mapping))
        await self.hook.after_create(review)
        return review

    async def get_review(self, review_id: UUID) -> ReviewResponse:
        """
        Get review by ID.

        Raises:
            NotFoundException: If review not found
        """
        stmt = select(reviews).where(reviews.c.id == review_id)
        result = await self.db.execute(stmt)
        row = result.fetchone()

        if not row:
            raise NotFoundException("Review not found")

        return ReviewResponse.model_validate(dict(row._mapping))

    async def list_reviews_for_doctor(
        self,
        doctor_id: UUID,
        page: int = 1,
        page_size: int = 20,
    ) -> ReviewListResponse:
        """List a doctor's reviews, newest first."""
        condition = reviews.c.doctor_id == doctor_id

        count_stmt = select(func.count()).select_from(reviews).where(condition)
        total_result = await self.db.execute(count_stmt)
        total = total_result.scalar() or 0

        stmt = (
            select(reviews)
            .where(condition)
            .order_by(reviews.c.created_at.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        result = await self.db.execute(stmt)
        items = [ReviewResponse.model_validate(dict(row._mapping)) for row in result.fetchall()]

        return ReviewListResponse(total=total, page=page, page_size=page_size, items=items)

    async def update_review(self, review_id: UUID, data: ReviewUpdate) -> ReviewResponse:
        """
        Update a review and refresh the doctor's rating.

        Args:
            review_id: Review ID
            data: Fields to change

        Returns:
            Updated review

        Raises:
            NotFoundException: If review not found
        """
        # Explicit nulls clear the comment and sub-ratings; rating is required
        update_values = data.model_dump(exclude_unset=True)
        if update_values.get("rating", 0) is None:
            del update_values["rating"]

        if not update_values:
            return await self.get_review(review_id)

        update_values["updated_at"] = utc_now()

        stmt = (
            update(reviews)
            .where(reviews.c.id == review_id)
            .values(**update_values)
            .returning(reviews)
        )
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()

        if not row:
            raise NotFoundException("Review not found")

        review = ReviewResponse.model_validate(dict(row._mapping))
        await self.hook.after_update(review)
        return review

    async def delete_review(self, review_id: UUID) -> ReviewResponse:
        """
        Delete a review and refresh the doctor's rating.

        Returns:
            The deleted review

        Raises:
            NotFoundException: If review not found; the rating is left alone
        """
        stmt = delete(reviews).where(reviews.c.id == review_id).returning(reviews)
        result = await self.db.execute(stmt)
        row = result.fetchone()
        await self.db.commit()

        if not row:
            raise NotFoundException("Review not found")

        review = ReviewResponse.model_validate(dict(row._mapping))
        await self.hook.after_delete(review)
        return review
