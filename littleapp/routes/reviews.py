"""
Little Application: Review Route Handlers
============================================

What:  /api/v1/reviews (advanced results, CRUD by id) and the nested
       /api/v1/posts/{post_id}/reviews collection.
Who:   Any client reads; writing a review requires a `user` or `admin`
       token, and only the author or an admin may edit or delete it.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.config import Settings, get_settings
from littleapp.database import get_db_session
from littleapp.deps import get_list_query, require_role
from littleapp.models.user import User
from littleapp.query import ListQuery
from littleapp.schemas.common import DataResponse, ErrorResponse, ListResponse, PageResult
from littleapp.schemas.review import (
    ReviewCreate,
    ReviewDetailResponse,
    ReviewResponse,
    ReviewUpdate,
)
from littleapp.services.review_service import review_service

router = APIRouter(prefix="/api/v1", tags=["Reviews"])

_WRITE_ERRORS = {
    400: {"description": "Invalid body or already reviewed", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the author", "model": ErrorResponse},
    404: {"description": "Review or post not found", "model": ErrorResponse},
}


@router.get(
    "/reviews",
    response_model=PageResult,
    responses={400: {"description": "Invalid query", "model": ErrorResponse}},
    summary="List reviews with filtering, projection, sorting and pagination",
)
async def list_reviews(
    response: Response,
    query: ListQuery = Depends(get_list_query),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> PageResult:
    result = await review_service.list_reviews(
        db, query, count_filtered=settings.count_filtered_total
    )
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/posts/{post_id}/reviews",
    response_model=ListResponse[ReviewResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="List every review of one post",
)
async def list_post_reviews(post_id: UUID, db: AsyncSession = Depends(get_db_session)):
    reviews = await review_service.list_post_reviews(db, post_id)
    return ListResponse(count=len(reviews), data=reviews)


@router.post(
    "/posts/{post_id}/reviews",
    status_code=201,
    response_model=DataResponse[ReviewResponse],
    responses=_WRITE_ERRORS,
    summary="Review a post",
)
async def add_review(
    post_id: UUID,
    body: ReviewCreate,
    user: User = Depends(require_role("user", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    return DataResponse(data=await review_service.add_review(db, post_id, body, user))


@router.get(
    "/reviews/{review_id}",
    response_model=DataResponse[ReviewDetailResponse],
    responses={404: {"description": "Review not found", "model": ErrorResponse}},
    summary="Get a single review",
)
async def get_review(review_id: UUID, db: AsyncSession = Depends(get_db_session)):
    return DataResponse(data=await review_service.get_review(db, review_id))


@router.put(
    "/reviews/{review_id}",
    response_model=DataResponse[ReviewResponse],
    responses=_WRITE_ERRORS,
    summary="Update a review",
)
async def update_review(
    review_id: UUID,
    body: ReviewUpdate,
    user: User = Depends(require_role("user", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    return DataResponse(data=await review_service.update_review(db, review_id, body, user))


@router.delete(
    "/reviews/{review_id}",
    response_model=DataResponse[dict],
    responses=_WRITE_ERRORS,
    summary="Delete a review",
)
async def delete_review(
    review_id: UUID,
    user: User = Depends(require_role("user", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    await review_service.delete_review(db, review_id, user)
    return DataResponse(data={})
