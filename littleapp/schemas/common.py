"""
Little Application: Shared Response Envelopes
================================================

What:  The JSON envelopes every endpoint returns.
How:   Success responses are `{success, count?, pagination?, data}`;
       errors are `{success: false, error, message, details?, request_id}`.
Who:   Route handlers (response_model) and the advanced results pipeline.
"""

from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class PageLink(BaseModel):
    """A pointer to a neighbouring page: `{page, limit}`."""
    page: int = Field(ge=1)
    limit: int = Field(ge=1)


class PageResult(BaseModel):
    """
    What:  One page of an advanced results query.
    Who:   Returned by the posts, courses, reviews and users list routes.

    Fields:
        count:      Number of records in `data` (≤ limit)
        pagination: Has a `next` key iff page*limit < total and a `prev`
                    key iff page > 1; each is a PageLink
        data:       Serialized records
        total:      Matching records across all pages; sent in the
                    X-Total-Count header, not the body
    """
    success: bool = True
    count: int = Field(ge=0)
    pagination: Dict[str, PageLink] = Field(default_factory=dict)
    data: List[Dict[str, Any]]
    total: int = Field(default=0, ge=0, exclude=True)


class DataResponse(BaseModel, Generic[T]):
    """Single-record (or arbitrary payload) envelope."""
    success: bool = True
    data: T


class ListResponse(BaseModel, Generic[T]):
    """Unpaginated list envelope."""
    success: bool = True
    count: int = Field(ge=0)
    data: List[T]


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "success": false,
            "error": "not_found",
            "message": "No post found with id of 5d725a1b7b292f5f8ceff788",
            "request_id": "1f2e3d4c"
        }
    """
    success: bool = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
    checked_at: datetime = Field(description="When this check ran (UTC)")
