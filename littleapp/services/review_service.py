"""
Little Application: Review Service
=====================================

What:  Business logic for reviews, including keeping each post's
       average_rating in step with its reviews.
Who:   routes/reviews.py and the nested /posts/{post_id}/reviews routes.

Average Rating:
    After every review create, update or delete the reviewed post gets
        average_rating = round(avg(rating), 1)
    or NULL once it has no reviews left.
"""

import logging
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from littleapp.exceptions import DatabaseError, NotFoundError
from littleapp.models.post import Post
from littleapp.models.review import Review
from littleapp.models.user import User
from littleapp.query import ListQuery, Populate, advanced_results
from littleapp.schemas.common import PageResult
from littleapp.schemas.review import (
    ReviewCreate,
    ReviewDetailResponse,
    ReviewResponse,
    ReviewUpdate,
)
from littleapp.services.access import ensure_owner
from littleapp.services.post_service import flush_or_raise

logger = logging.getLogger(__name__)

REVIEW_POPULATE = Populate(relation="post", fields=("name", "description"))


class ReviewService:

    async def list_reviews(
        self,
        db: AsyncSession,
        query: ListQuery,
        count_filtered: bool = True,
    ) -> PageResult:
        try:
            return await advanced_results(
                db,
                Review,
                query,
                populate=REVIEW_POPULATE,
                count_filtered=count_filtered,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing reviews: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve reviews. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _load_post(self, db: AsyncSession, post_id: uuid.UUID) -> Post:
        post = await db.get(Post, post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def _load(self, db: AsyncSession, review_id: uuid.UUID) -> Review:
        result = await db.execute(
            select(Review)
            .options(selectinload(Review.post).load_only(Post.name, Post.description))
            .where(Review.id == review_id)
        )
        review = result.scalar_one_or_none()
        if review is None:
            raise NotFoundError(resource="review", resource_id=str(review_id))
        return review

    async def list_post_reviews(
        self, db: AsyncSession, post_id: uuid.UUID
    ) -> List[ReviewResponse]:
        await self._load_post(db, post_id)
        result = await db.execute(
            select(Review).where(Review.post_id == post_id).order_by(Review.created_at)
        )
        return [ReviewResponse.model_validate(r) for r in result.scalars().all()]

    async def get_review(self, db: AsyncSession, review_id: uuid.UUID) -> ReviewDetailResponse:
        return ReviewDetailResponse.model_validate(await self._load(db, review_id))

    async def add_review(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        data: ReviewCreate,
        user: User,
    ) -> ReviewResponse:
        """One review per user per post; a second one is a duplicate (400)."""
        post = await self._load_post(db, post_id)

        review = Review(**data.model_dump(), post_id=post.id, user_id=user.id)
        db.add(review)
        await flush_or_raise(db, "review")
        await self.update_average_rating(db, post.id)

        logger.info("Review %s added to post %s by user %s", review.id, post.id, user.id)
        return ReviewResponse.model_validate(review)

    async def update_review(
        self,
        db: AsyncSession,
        review_id: uuid.UUID,
        data: ReviewUpdate,
        user: User,
    ) -> ReviewResponse:
        review = await self._load(db, review_id)
        ensure_owner(review.user_id, user, "update", "review")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(review, field, value)
        await flush_or_raise(db, "review")
        await self.update_average_rating(db, review.post_id)
        return ReviewResponse.model_validate(review)

    async def delete_review(self, db: AsyncSession, review_id: uuid.UUID, user: User) -> None:
        review = await self._load(db, review_id)
        ensure_owner(review.user_id, user, "delete", "review")

        post_id = review.post_id
        await db.delete(review)
        await flush_or_raise(db, "review")
        await self.update_average_rating(db, post_id)
        logger.info("Review %s deleted by user %s", review_id, user.id)

    async def update_average_rating(self, db: AsyncSession, post_id: uuid.UUID) -> None:
        """Recompute post.average_rating from its remaining reviews."""
        result = await db.execute(
            select(func.avg(Review.rating)).where(Review.post_id == post_id)
        )
        average = result.scalar()

        post = await db.get(Post, post_id)
        if post is None:
            return
        post.average_rating = round(float(average), 1) if average is not None else None
        await flush_or_raise(db, "post")


review_service = ReviewService()
