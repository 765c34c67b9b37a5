"""Pydantic schemas for request/response validation."""

from .common import (
    CamelModel,
    ErrorResponse,
    HealthCheckResponse,
    MessageResponse,
    PaginationInfo,
)
from .notes import (
    CollaboratorResponse,
    NoteCreate,
    NoteDetailResponse,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
    UserSummary,
)

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "HealthCheckResponse",
    "MessageResponse",
    "PaginationInfo",
    "CollaboratorResponse",
    "NoteCreate",
    "NoteDetailResponse",
    "NoteListResponse",
    "NoteResponse",
    "NoteUpdate",
    "ShareRequest",
    "UserSummary",
]
