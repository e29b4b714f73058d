"""
Little Application: Review Schemas
=====================================

What:  Request bodies and responses for reviews.
Who:   routes/reviews.py and ReviewService.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from littleapp.schemas.course import PostSummary


class ReviewCreate(BaseModel):
    """Body of POST /api/v1/posts/{post_id}/reviews."""
    title: str = Field(min_length=1, max_length=100, description="Please add a title for the review")
    text: str = Field(min_length=1, max_length=2000)
    rating: int = Field(ge=1, le=10, description="Rating between 1 and 10")


class ReviewUpdate(BaseModel):
    """Body of PUT /api/v1/reviews/{id}; only the fields sent are changed."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    text: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    rating: Optional[int] = Field(default=None, ge=1, le=10)


class ReviewResponse(BaseModel):
    id: uuid.UUID
    title: str
    text: str
    rating: int
    created_at: datetime
    post_id: uuid.UUID
    user_id: uuid.UUID

    model_config = {"from_attributes": True}


class ReviewDetailResponse(ReviewResponse):
    post: Optional[PostSummary] = None
