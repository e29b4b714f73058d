"""
Little Application: Course Service
=====================================

What:  Business logic for courses, including keeping each post's
       average_cost in step with its courses' tuition.
Who:   routes/courses.py and the nested /posts/{post_id}/courses routes.

Average Cost:
    After every course create, update or delete the owning post gets
        average_cost = ceil(avg(tuition) / 10) * 10
    or NULL once it has no courses left.
"""

import logging
import math
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from littleapp.exceptions import DatabaseError, NotFoundError
from littleapp.models.course import Course
from littleapp.models.post import Post
from littleapp.models.user import User
from littleapp.query import ListQuery, Populate, advanced_results
from littleapp.schemas.common import PageResult
from littleapp.schemas.course import (
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseUpdate,
)
from littleapp.services.access import ensure_owner
from littleapp.services.post_service import flush_or_raise

logger = logging.getLogger(__name__)

# Courses embed the parent post's `name description`
COURSE_POPULATE = Populate(relation="post", fields=("name", "description"))


class CourseService:
    """
    Responsibilities:
        - list_courses(): advanced results over courses, post summary embedded
        - list_post_courses(): every course of one post
        - get_course(): one course with its post summary
        - add_course() / update_course() / delete_course()
    """

    async def list_courses(
        self,
        db: AsyncSession,
        query: ListQuery,
        count_filtered: bool = True,
    ) -> PageResult:
        try:
            return await advanced_results(
                db,
                Course,
                query,
                populate=COURSE_POPULATE,
                count_filtered=count_filtered,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing courses: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve courses. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _load_post(self, db: AsyncSession, post_id: uuid.UUID) -> Post:
        post = await db.get(Post, post_id)
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def _load(self, db: AsyncSession, course_id: uuid.UUID) -> Course:
        try:
            result = await db.execute(
                select(Course)
                .options(selectinload(Course.post).load_only(Post.name, Post.description))
                .where(Course.id == course_id)
            )
            course = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching course %s: %s", course_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the course. Please try again.",
                context={"course_id": str(course_id)},
            )
        if course is None:
            raise NotFoundError(resource="course", resource_id=str(course_id))
        return course

    async def list_post_courses(
        self, db: AsyncSession, post_id: uuid.UUID
    ) -> List[CourseResponse]:
        await self._load_post(db, post_id)
        result = await db.execute(
            select(Course).where(Course.post_id == post_id).order_by(Course.created_at)
        )
        return [CourseResponse.model_validate(c) for c in result.scalars().all()]

    async def get_course(self, db: AsyncSession, course_id: uuid.UUID) -> CourseDetailResponse:
        course = await self._load(db, course_id)
        return CourseDetailResponse.model_validate(course)

    async def add_course(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        data: CourseCreate,
        user: User,
    ) -> CourseResponse:
        post = await self._load_post(db, post_id)
        ensure_owner(post.user_id, user, "add a course to", "post")

        course = Course(**data.model_dump(), post_id=post.id, user_id=user.id)
        db.add(course)
        await flush_or_raise(db, "course")
        await self.update_average_cost(db, post.id)

        logger.info("Course %s added to post %s", course.id, post.id)
        return CourseResponse.model_validate(course)

    async def update_course(
        self,
        db: AsyncSession,
        course_id: uuid.UUID,
        data: CourseUpdate,
        user: User,
    ) -> CourseResponse:
        course = await self._load(db, course_id)
        ensure_owner(course.user_id, user, "update", "course")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(course, field, value)
        await flush_or_raise(db, "course")
        await self.update_average_cost(db, course.post_id)
        return CourseResponse.model_validate(course)

    async def delete_course(self, db: AsyncSession, course_id: uuid.UUID, user: User) -> None:
        course = await self._load(db, course_id)
        ensure_owner(course.user_id, user, "delete", "course")

        post_id = course.post_id
        await db.delete(course)
        await flush_or_raise(db, "course")
        await self.update_average_cost(db, post_id)
        logger.info("Course %s deleted by user %s", course_id, user.id)

    async def update_average_cost(self, db: AsyncSession, post_id: uuid.UUID) -> None:
        """Recompute post.average_cost from its remaining courses."""
        result = await db.execute(
            select(func.avg(Course.tuition)).where(Course.post_id == post_id)
        )
        average = result.scalar()

        post = await db.get(Post, post_id)
        if post is None:
            return
        post.average_cost = math.ceil(average / 10) * 10 if average is not None else None
        await flush_or_raise(db, "post")


# ── Singleton Instance ────────────────────────────────────────────────────
course_service = CourseService()
