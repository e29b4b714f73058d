"""
Little Application: Review SQLAlchemy Model
==============================================

What:  ORM model representing the `reviews` table.
How:   Each review belongs to one post (many-to-one `post` relationship,
       eagerly joined by GET /api/v1/reviews) and is written by a user.

Table Design:
    - one review per user per post (uq_reviews_post_user)
    - rating is 1..10; the post's average_rating is maintained by
      ReviewService after every write
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from littleapp.database import Base

if TYPE_CHECKING:
    from littleapp.models.post import Post


class Review(Base):
    """A user's rating and write-up of a post."""

    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    text: Mapped[str] = mapped_column(String(2000), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    post: Mapped["Post"] = relationship(back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_reviews_post_user"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, rating={self.rating}, post_id={self.post_id})>"
