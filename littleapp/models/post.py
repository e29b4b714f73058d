"""
Little Application: Post SQLAlchemy Model
============================================

What:  ORM model representing the `posts` table.
How:   Each post is owned by a user and has a one-to-many `courses`
       relationship, which is the collection eagerly joined by
       GET /api/v1/posts.

Table Design:
    - name is unique; slug is derived from it on create/rename
    - average_cost is maintained by CourseService (ceil(avg tuition / 10) * 10)
    - photo holds the stored upload filename (default 'no-photo.jpg')
    - average_rating is maintained by ReviewService (avg rating, 1 decimal)
    - deleting a post deletes its courses and reviews (ORM cascade)

Query Patterns:
    - List recent posts: ORDER BY created_at DESC LIMIT :limit OFFSET :skip
      → idx_posts_created_at
"""

import re
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from littleapp.database import Base

if TYPE_CHECKING:
    from littleapp.models.course import Course
    from littleapp.models.review import Review


def slugify(value: str) -> str:
    """Lowercase, dash-separated URL slug ('Devworks Bootcamp' → 'devworks-bootcamp')."""
    cleaned = re.sub(r"[^a-z0-9]+", "-", str(value or "").lower()).strip("-")
    return cleaned or "post"


class Post(Base):
    """A listing that publishers attach courses to."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(60), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[str] = mapped_column(String(255), nullable=False)

    # Mean review rating, rounded to one decimal
    average_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    average_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    photo: Mapped[str] = mapped_column(String(255), nullable=False, default="no-photo.jpg")
    housing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_assistance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_guarantee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accept_gi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    courses: Mapped[List["Course"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Course.created_at",
    )
    reviews: Mapped[List["Review"]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Review.created_at",
    )

    __table_args__ = (
        Index("idx_posts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, name='{self.name}')>"
