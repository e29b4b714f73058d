"""
Little Application: Course Schemas
=====================================

What:  Request bodies and responses for courses.
Who:   routes/courses.py and CourseService.
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

MinimumSkill = Literal["beginner", "intermediate", "advanced"]


class CourseCreate(BaseModel):
    """Body of POST /api/v1/posts/{post_id}/courses."""
    title: str = Field(min_length=1, max_length=200, description="Please add a course title")
    description: str = Field(min_length=1, max_length=2000)
    weeks: str = Field(min_length=1, max_length=20, description="Number of weeks")
    tuition: float = Field(ge=0, description="Tuition cost")
    minimum_skill: MinimumSkill
    scholarship_available: bool = False


class CourseUpdate(BaseModel):
    """Body of PUT /api/v1/courses/{id}; only the fields sent are changed."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    weeks: Optional[str] = Field(default=None, min_length=1, max_length=20)
    tuition: Optional[float] = Field(default=None, ge=0)
    minimum_skill: Optional[MinimumSkill] = None
    scholarship_available: Optional[bool] = None


class PostSummary(BaseModel):
    """The slice of a post embedded in course responses (`name description`)."""
    id: uuid.UUID
    name: str
    description: str

    model_config = {"from_attributes": True}


class CourseResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    weeks: str
    tuition: float
    minimum_skill: str
    scholarship_available: bool
    created_at: datetime
    post_id: uuid.UUID
    user_id: uuid.UUID

    model_config = {"from_attributes": True}


class CourseDetailResponse(CourseResponse):
    """GET /api/v1/courses/{id}: the course with its post summary."""
    post: Optional[PostSummary] = None
