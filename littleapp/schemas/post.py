"""
Little Application: Post Schemas
===================================

What:  Request bodies and the single-record response for posts.
Who:   routes/posts.py and PostService.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
URL_PATTERN = r"^https?://\S+$"


class PostBase(BaseModel):
    website: Optional[str] = Field(default=None, pattern=URL_PATTERN, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False


class PostCreate(PostBase):
    """Body of POST /api/v1/posts."""
    name: str = Field(min_length=1, max_length=50, description="Unique post name")
    description: str = Field(min_length=1, max_length=500)
    address: str = Field(min_length=1, max_length=255)


class PostUpdate(BaseModel):
    """Body of PUT /api/v1/posts/{id}; only the fields sent are changed."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    address: Optional[str] = Field(default=None, min_length=1, max_length=255)
    website: Optional[str] = Field(default=None, pattern=URL_PATTERN, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None


class PostResponse(PostBase):
    """Full representation of a post (without its courses)."""
    id: uuid.UUID
    name: str
    slug: str
    description: str
    address: str
    average_rating: Optional[float] = None
    average_cost: Optional[float] = None
    photo: str
    created_at: datetime
    user_id: uuid.UUID

    model_config = {"from_attributes": True}
