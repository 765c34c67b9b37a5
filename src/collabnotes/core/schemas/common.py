"""
Shared response schemas - pagination, errors etc
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys, accepting either case on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PaginationInfo(CamelModel):
    """Pagination block returned alongside list results"""

    current_page: int
    total_pages: int
    total_notes: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def create(cls, page: int, per_page: int, total: int) -> "PaginationInfo":
        # always report at least one page once we've actually counted
        pages = max(1, (total + per_page - 1) // per_page)

        return cls(
            current_page=page,
            total_pages=pages,
            total_notes=total,
            has_next_page=page < pages,
            has_prev_page=page > 1,
        )

    @classmethod
    def empty(cls) -> "PaginationInfo":
        """Shape returned when the user has no matching notes at all."""
        return cls(
            current_page=1,
            total_pages=0,
            total_notes=0,
            has_next_page=False,
            has_prev_page=False,
        )


class ErrorResponse(CamelModel):
    """Standard error response schema."""

    message: str = Field(description="Human-readable error message")
    error: Optional[str] = Field(default=None, description="Diagnostic detail (debug mode only)")
    permission_info: Optional[dict[str, Any]] = Field(
        default=None, description="Requester access summary (debug mode only)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Write access denied",
            }
        }
    )


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class HealthCheckResponse(BaseModel):
    """Health check response schema."""

    status: str = Field(description="Overall health status")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(description="Application version")
    checks: dict[str, dict[str, Any]] = Field(description="Individual component health checks")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "timestamp": "2025-09-13T10:30:00Z",
                "version": "1.0.0",
                "checks": {
                    "database": {"status": "healthy", "response_time_ms": 15},
                    "redis": {"status": "healthy", "response_time_ms": 5},
                },
            }
        }
    )
