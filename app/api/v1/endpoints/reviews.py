"""Review endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from app.dependencies import ReviewServiceDep
from app.schemas.reviews import (
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)

router = APIRouter()


@router.post(
    "/",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a doctor",
)
async def create_review(
    data: ReviewCreate,
    service: ReviewServiceDep,
) -> ReviewResponse:
    """
    Leave a review for an appointment.

    - **rating**: Overall rating, 1 to 5
    - **punctuality**, **communication**, **treatment**: Optional detailed ratings
    - **comment**: Up to 500 characters
    """
    return await service.create_review(data)


@router.get(
    "/doctor/{doctor_id}",
    response_model=ReviewListResponse,
    summary="List a doctor's reviews",
)
async def list_doctor_reviews(
    doctor_id: UUID,
    service: ReviewServiceDep,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> ReviewListResponse:
    """List reviews for a doctor, newest first."""
    return await service.list_reviews_for_doctor(doctor_id, page=page, page_size=page_size)


@router.patch("/{review_id}", response_model=ReviewResponse, summary="Edit review")
async def update_review(
    review_id: UUID,
    data: ReviewUpdate,
    service: ReviewServiceDep,
) -> ReviewResponse:
    """Edit a review's ratings or comment."""
    return await service.update_review(review_id, data)


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete review",
)
async def delete_review(
    review_id: UUID,
    service: ReviewServiceDep,
) -> None:
    """Delete a review."""
    await service.delete_review(review_id)
