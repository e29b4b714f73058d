"""
Little Application: Course Route Handlers
============================================

What:  /api/v1/courses (advanced results, CRUD by id) and the nested
       /api/v1/posts/{post_id}/courses collection.
Who:   Any client; writes require a publisher or admin token.

    GET /api/v1/courses embeds each course's post as {id, name, description}.
    GET /api/v1/posts/{post_id}/courses is unpaginated: every course of the post.
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
from littleapp.schemas.course import (
    CourseCreate,
    CourseDetailResponse,
    CourseResponse,
    CourseUpdate,
)
from littleapp.services.course_service import course_service

router = APIRouter(prefix="/api/v1", tags=["Courses"])

_WRITE_ERRORS = {
    400: {"description": "Invalid body", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the owner", "model": ErrorResponse},
    404: {"description": "Course or post not found", "model": ErrorResponse},
}


@router.get(
    "/courses",
    response_model=PageResult,
    responses={400: {"description": "Invalid query", "model": ErrorResponse}},
    summary="List courses with filtering, projection, sorting and pagination",
)
async def list_courses(
    response: Response,
    query: ListQuery = Depends(get_list_query),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> PageResult:
    result = await course_service.list_courses(
        db, query, count_filtered=settings.count_filtered_total
    )
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/posts/{post_id}/courses",
    response_model=ListResponse[CourseResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="List every course of one post",
)
async def list_post_courses(post_id: UUID, db: AsyncSession = Depends(get_db_session)):
    courses = await course_service.list_post_courses(db, post_id)
    return ListResponse(count=len(courses), data=courses)


@router.post(
    "/posts/{post_id}/courses",
    status_code=201,
    response_model=DataResponse[CourseResponse],
    responses=_WRITE_ERRORS,
    summary="Add a course to a post",
)
async def add_course(
    post_id: UUID,
    body: CourseCreate,
    user: User = Depends(require_role("publisher", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    return DataResponse(data=await course_service.add_course(db, post_id, body, user))


@router.get(
    "/courses/{course_id}",
    response_model=DataResponse[CourseDetailResponse],
    responses={404: {"description": "Course not found", "model": ErrorResponse}},
    summary="Get a single course",
)
async def get_course(course_id: UUID, db: AsyncSession = Depends(get_db_session)):
    return DataResponse(data=await course_service.get_course(db, course_id))


@router.put(
    "/courses/{course_id}",
    response_model=DataResponse[CourseResponse],
    responses=_WRITE_ERRORS,
    summary="Update a course",
)
async def update_course(
    course_id: UUID,
    body: CourseUpdate,
    user: User = Depends(require_role("publisher", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    return DataResponse(data=await course_service.update_course(db, course_id, body, user))


@router.delete(
    "/courses/{course_id}",
    response_model=DataResponse[dict],
    responses=_WRITE_ERRORS,
    summary="Delete a course",
)
async def delete_course(
    course_id: UUID,
    user: User = Depends(require_role("publisher", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    await course_service.delete_course(db, course_id, user)
    return DataResponse(data={})
