"""
Little Application: Post Service
===================================

What:  Business logic for posts: the advanced results listing, single
       lookups, create/update/delete with ownership checks, and photos.
How:   Stateless; every method receives the request's AsyncSession (and
       the acting user where one is required). Flushes happen here; the
       session dependency commits.
Who:   routes/posts.py.

Error Handling Strategy:
    - Missing rows         → NotFoundError (404)
    - Not owner / admin    → AuthorizationError (403)
    - Duplicate post name  → ValidationError (400)
    - Other SQL failures   → DatabaseError (500), details logged
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.exceptions import DatabaseError, NotFoundError, ValidationError
from littleapp.models.post import Post, slugify
from littleapp.models.user import User
from littleapp.query import ListQuery, Populate, advanced_results
from littleapp.schemas.common import PageResult
from littleapp.schemas.post import PostCreate, PostResponse, PostUpdate
from littleapp.services.access import ensure_owner
from littleapp.services.file_service import FileService

logger = logging.getLogger(__name__)

# GET /api/v1/posts embeds each post's courses
POST_POPULATE = Populate(relation="courses")


async def flush_or_raise(db: AsyncSession, resource: str) -> None:
    """Flush pending changes, translating integrity and SQL errors."""
    try:
        await db.flush()
    except IntegrityError as e:
        logger.warning("Integrity error writing %s: %s", resource, str(e.orig))
        raise ValidationError(
            message="Duplicate field value entered",
            context={"resource": resource},
        )
    except SQLAlchemyError as e:
        logger.error("Database error writing %s: %s", resource, str(e), exc_info=True)
        raise DatabaseError(context={"resource": resource, "error_type": type(e).__name__})


class PostService:
    """
    Responsibilities:
        - list_posts(): advanced results over posts, courses embedded
        - get_post(): single post with not-found handling
        - create_post() / update_post() / delete_post()
        - upload_photo(): validate, store, and record a post photo
    """

    async def list_posts(
        self,
        db: AsyncSession,
        query: ListQuery,
        count_filtered: bool = True,
    ) -> PageResult:
        try:
            return await advanced_results(
                db,
                Post,
                query,
                populate=POST_POPULATE,
                count_filtered=count_filtered,
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _load(self, db: AsyncSession, post_id: uuid.UUID) -> Post:
        try:
            result = await db.execute(select(Post).where(Post.id == post_id))
            post = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the post. Please try again.",
                context={"post_id": str(post_id)},
            )
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    async def get_post(self, db: AsyncSession, post_id: uuid.UUID) -> PostResponse:
        post = await self._load(db, post_id)
        return PostResponse.model_validate(post)

    async def create_post(self, db: AsyncSession, data: PostCreate, user: User) -> PostResponse:
        post = Post(
            **data.model_dump(),
            slug=slugify(data.name),
            user_id=user.id,
        )
        db.add(post)
        await flush_or_raise(db, "post")
        logger.info("Post %s created by user %s", post.id, user.id)
        return PostResponse.model_validate(post)

    async def update_post(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        data: PostUpdate,
        user: User,
    ) -> PostResponse:
        post = await self._load(db, post_id)
        ensure_owner(post.user_id, user, "update", "post")

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(post, field, value)
        if "name" in changes:
            post.slug = slugify(post.name)

        await flush_or_raise(db, "post")
        logger.info("Post %s updated: %s", post.id, sorted(changes))
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, post_id: uuid.UUID, user: User) -> None:
        """Delete a post and, through the ORM cascade, its courses."""
        post = await self._load(db, post_id)
        ensure_owner(post.user_id, user, "delete", "post")
        await db.delete(post)
        await flush_or_raise(db, "post")
        logger.info("Post %s deleted by user %s", post_id, user.id)

    async def upload_photo(
        self,
        db: AsyncSession,
        post_id: uuid.UUID,
        user: User,
        files: FileService,
        filename: str | None,
        content_type: str | None,
        content: bytes,
    ) -> str:
        post = await self._load(db, post_id)
        ensure_owner(post.user_id, user, "update", "post")

        name = await files.save_photo(post.id, filename, content_type, content)
        post.photo = name
        await flush_or_raise(db, "post")
        return name


# ── Singleton Instance ────────────────────────────────────────────────────
post_service = PostService()
