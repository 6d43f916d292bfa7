"""
Aquarium Log Backend: Shared Pydantic Schemas
===============================================

What:  Response pieces shared by several endpoints: pagination metadata,
       error bodies and the health check payload.
"""

import math
from typing import List, Optional

from pydantic import BaseModel, Field


class PaginationMeta(BaseModel):
    """
    Offset pagination state for list endpoints.

    next_page / prev_page are null at the edges; total_pages is 0 for an
    empty result.
    """
    current_page: int = Field(description="1-indexed page that was returned")
    next_page: Optional[int] = Field(default=None, description="Next page number, null on the last page")
    prev_page: Optional[int] = Field(default=None, description="Previous page number, null on the first page")
    total_pages: int = Field(description="Number of pages for the current filters")
    total_count: int = Field(description="Number of rows matching the current filters")

    @classmethod
    def build(cls, page: int, per: int, total_count: int) -> "PaginationMeta":
        total_pages = math.ceil(total_count / per) if per > 0 else 0
        return cls(
            current_page=page,
            next_page=page + 1 if page < total_pages else None,
            prev_page=page - 1 if page > 1 else None,
            total_pages=total_pages,
            total_count=total_count,
        )


class ErrorResponse(BaseModel):
    """
    Error body for 400/401/403/404/500 responses.

    Example:
        {"error": "位置情報が必要です"}
    """
    error: str = Field(description="Human-readable error description")


class ValidationErrorResponse(BaseModel):
    """
    Error body for 422 responses: every failing rule at once.

    Example:
        {"errors": ["name can't be blank", "latitude must be between -90 and 90"]}
    """
    errors: List[str] = Field(description="Field-level error messages")


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
