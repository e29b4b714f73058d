"""
Little Application: User Admin Route Handlers
================================================

What:  /api/v1/users: list (advanced results), get, create, update and
       delete accounts.
Who:   Admins only; every route depends on require_role("admin").
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.config import Settings, get_settings
from littleapp.database import get_db_session
from littleapp.deps import get_list_query, require_role
from littleapp.query import ListQuery
from littleapp.schemas.common import DataResponse, ErrorResponse, PageResult
from littleapp.schemas.user import UserCreate, UserResponse, UserUpdate
from littleapp.services.user_service import user_service

router = APIRouter(
    prefix="/api/v1/users",
    tags=["Users"],
    dependencies=[Depends(require_role("admin"))],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Not an admin", "model": ErrorResponse},
    },
)


@router.get("", response_model=PageResult, summary="List users")
async def list_users(
    response: Response,
    query: ListQuery = Depends(get_list_query),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> PageResult:
    result = await user_service.list_users(
        db, query, count_filtered=settings.count_filtered_total
    )
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/{user_id}",
    response_model=DataResponse[UserResponse],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a single user",
)
async def get_user(user_id: UUID, db: AsyncSession = Depends(get_db_session)):
    return DataResponse(data=await user_service.get_user(db, user_id))


@router.post(
    "",
    status_code=201,
    response_model=DataResponse[UserResponse],
    responses={400: {"description": "Invalid body or email taken", "model": ErrorResponse}},
    summary="Create a user",
)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db_session)):
    return DataResponse(data=await user_service.create_user(db, body))


@router.put(
    "/{user_id}",
    response_model=DataResponse[UserResponse],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Update a user",
)
async def update_user(user_id: UUID, body: UserUpdate, db: AsyncSession = Depends(get_db_session)):
    return DataResponse(data=await user_service.update_user(db, user_id, body))


@router.delete(
    "/{user_id}",
    response_model=DataResponse[dict],
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Delete a user and everything they own",
)
async def delete_user(user_id: UUID, db: AsyncSession = Depends(get_db_session)):
    await user_service.delete_user(db, user_id)
    return DataResponse(data={})
