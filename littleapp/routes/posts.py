"""
Little Application: Post Route Handlers
==========================================

What:  /api/v1/posts: the advanced results listing, CRUD, and photo upload.
How:   Thin handlers; parsing lives in deps.get_list_query, business rules
       in PostService. Errors surface through the global handlers.

Listing Query String:
    ?average_cost[lte]=10000&housing=true   filters (eq, gt, gte, lt, lte, in)
    ?select=name,description               projection (id always included)
    ?sort=-average_cost,name               ordering (default -created_at)
    ?page=2&limit=10                       page window (default 1 / DEFAULT_PAGE_LIMIT)

    The total match count is returned in the X-Total-Count header.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.config import Settings, get_settings
from littleapp.database import get_db_session
from littleapp.deps import get_file_service, get_list_query, require_role
from littleapp.models.user import User
from littleapp.query import ListQuery
from littleapp.schemas.common import DataResponse, ErrorResponse, PageResult
from littleapp.schemas.post import PostCreate, PostResponse, PostUpdate
from littleapp.services.file_service import FileService
from littleapp.services.post_service import post_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Posts"])

_ERRORS = {
    400: {"description": "Invalid query or body", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_WRITE_ERRORS = {
    **_ERRORS,
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not the owner", "model": ErrorResponse},
    404: {"description": "Post not found", "model": ErrorResponse},
}


@router.get(
    "/posts",
    response_model=PageResult,
    responses=_ERRORS,
    summary="List posts with filtering, projection, sorting and pagination",
)
async def list_posts(
    response: Response,
    query: ListQuery = Depends(get_list_query),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> PageResult:
    """
    Each post embeds its courses unless `select` is given without `courses`.
    """
    result = await post_service.list_posts(
        db, query, count_filtered=settings.count_filtered_total
    )
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/posts/{post_id}",
    response_model=DataResponse[PostResponse],
    responses={404: {"description": "Post not found", "model": ErrorResponse}},
    summary="Get a single post",
)
async def get_post(post_id: UUID, db: AsyncSession = Depends(get_db_session)):
    return DataResponse(data=await post_service.get_post(db, post_id))


@router.post(
    "/posts",
    status_code=201,
    response_model=DataResponse[PostResponse],
    responses=_WRITE_ERRORS,
    summary="Create a post",
)
async def create_post(
    body: PostCreate,
    user: User = Depends(require_role("publisher", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    return DataResponse(data=await post_service.create_post(db, body, user))


@router.put(
    "/posts/{post_id}",
    response_model=DataResponse[PostResponse],
    responses=_WRITE_ERRORS,
    summary="Update a post",
)
async def update_post(
    post_id: UUID,
    body: PostUpdate,
    user: User = Depends(require_role("publisher", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    return DataResponse(data=await post_service.update_post(db, post_id, body, user))


@router.delete(
    "/posts/{post_id}",
    response_model=DataResponse[dict],
    responses=_WRITE_ERRORS,
    summary="Delete a post and its courses",
)
async def delete_post(
    post_id: UUID,
    user: User = Depends(require_role("publisher", "admin")),
    db: AsyncSession = Depends(get_db_session),
):
    await post_service.delete_post(db, post_id, user)
    return DataResponse(data={})


@router.put(
    "/posts/{post_id}/photo",
    response_model=DataResponse[str],
    responses=_WRITE_ERRORS,
    summary="Upload a post photo",
)
async def upload_photo(
    post_id: UUID,
    file: UploadFile | None = File(default=None, description="Image file"),
    user: User = Depends(require_role("publisher", "admin")),
    files: FileService = Depends(get_file_service),
    db: AsyncSession = Depends(get_db_session),
):
    """Store the photo as photo_<post id><ext> and record the name on the post."""
    if file is None:
        content, filename, content_type = b"", None, None
    else:
        try:
            content = await file.read()
        finally:
            await file.close()
        filename, content_type = file.filename, file.content_type

    logger.info("Photo upload for post %s: %d bytes", post_id, len(content))
    name = await post_service.upload_photo(
        db, post_id, user, files, filename, content_type, content
    )
    return DataResponse(data=name)
