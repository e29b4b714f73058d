"""
Little Application: User Service
===================================

What:  Admin management of user accounts: advanced results listing,
       lookup, create, update and delete.
Who:   routes/users.py (every route requires the admin role).

Deleting a user:
    1. Their posts are deleted (the ORM cascade takes those posts' courses
       and reviews with them)
    2. Their remaining courses and reviews on other users' posts are
       deleted, and those posts' average_cost / average_rating recomputed
    3. The user row is deleted
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.exceptions import DatabaseError, NotFoundError, ValidationError
from littleapp.models.course import Course
from littleapp.models.post import Post
from littleapp.models.review import Review
from littleapp.models.user import User
from littleapp.query import ListQuery, advanced_results
from littleapp.schemas.common import PageResult
from littleapp.schemas.user import UserCreate, UserResponse, UserUpdate
from littleapp.security import hash_password
from littleapp.services.course_service import course_service
from littleapp.services.post_service import flush_or_raise
from littleapp.services.review_service import review_service

logger = logging.getLogger(__name__)


class UserService:

    async def list_users(
        self,
        db: AsyncSession,
        query: ListQuery,
        count_filtered: bool = True,
    ) -> PageResult:
        try:
            return await advanced_results(db, User, query, count_filtered=count_filtered)
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _load(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def _ensure_email_free(
        self, db: AsyncSession, email: str, exclude_id: uuid.UUID | None = None
    ) -> None:
        statement = select(User.id).where(User.email == email)
        if exclude_id is not None:
            statement = statement.where(User.id != exclude_id)
        existing = await db.execute(statement)
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(message="Email is already registered", field="email")

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> UserResponse:
        return UserResponse.model_validate(await self._load(db, user_id))

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserResponse:
        await self._ensure_email_free(db, data.email)
        user = User(
            name=data.name,
            email=data.email,
            role=data.role,
            password_hash=hash_password(data.password),
        )
        db.add(user)
        await flush_or_raise(db, "user")
        logger.info("User %s created with role %s", user.id, user.role)
        return UserResponse.model_validate(user)

    async def update_user(
        self, db: AsyncSession, user_id: uuid.UUID, data: UserUpdate
    ) -> UserResponse:
        user = await self._load(db, user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            await self._ensure_email_free(db, changes["email"], exclude_id=user.id)

        for field, value in changes.items():
            setattr(user, field, value)
        await flush_or_raise(db, "user")
        return UserResponse.model_validate(user)

    async def delete_user(self, db: AsyncSession, user_id: uuid.UUID) -> None:
        user = await self._load(db, user_id)

        posts = await db.execute(select(Post).where(Post.user_id == user.id))
        for post in posts.scalars().all():
            await db.delete(post)
        await flush_or_raise(db, "post")

        touched_by_courses = set()
        courses = await db.execute(select(Course).where(Course.user_id == user.id))
        for course in courses.scalars().all():
            touched_by_courses.add(course.post_id)
            await db.delete(course)

        touched_by_reviews = set()
        reviews = await db.execute(select(Review).where(Review.user_id == user.id))
        for review in reviews.scalars().all():
            touched_by_reviews.add(review.post_id)
            await db.delete(review)
        await flush_or_raise(db, "user")

        for post_id in touched_by_courses:
            await course_service.update_average_cost(db, post_id)
        for post_id in touched_by_reviews:
            await review_service.update_average_rating(db, post_id)

        await db.delete(user)
        await flush_or_raise(db, "user")
        logger.info("User %s deleted", user_id)


user_service = UserService()
