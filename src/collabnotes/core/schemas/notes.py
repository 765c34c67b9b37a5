"""
Note schemas.

API contracts for note CRUD, sharing and the paginated note list.
Responses use camelCase keys; request bodies accept camelCase or snake_case.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from ..models.collaborator import Permission
from .common import CamelModel, PaginationInfo


TITLE_MAX_LENGTH = 200


def _clean_title(v: Optional[str]) -> Optional[str]:
    # length is checked on the trimmed value
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Title is required")
    if len(v) > TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be at most {TITLE_MAX_LENGTH} characters")
    return v


class NoteCreate(CamelModel):
    """Note creation request schema."""

    title: str = Field(description="Note title")
    content: str = Field(default="", description="Note content")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Trip Plan",
                "content": "Day 1: fly out. Day 2: hike.",
            }
        }
    )


class NoteUpdate(CamelModel):
    """Partial update - omitted fields keep their value."""

    title: Optional[str] = Field(default=None, description="Note title")
    content: Optional[str] = Field(default=None, description="Note content")
    is_archived: Optional[bool] = Field(default=None, description="Archive or restore the note")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _clean_title(v)


class ShareRequest(CamelModel):
    """Share a note with another user by email."""

    email: EmailStr = Field(description="Email of the user to share with")
    # checked by the service so an unknown value maps to a plain 400
    permission: str = Field(description="read or write")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "colleague@example.com", "permission": "write"}
        }
    )


class UserSummary(CamelModel):
    """Display fields of a user referenced by a note."""

    id: uuid.UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class CollaboratorResponse(CamelModel):
    """Collaborator entry with the user resolved."""

    user_id: uuid.UUID
    user: UserSummary
    permission: Permission

    model_config = ConfigDict(from_attributes=True)


class NoteResponse(CamelModel):
    """Note with owner and collaborators resolved."""

    id: uuid.UUID = Field(description="Note unique identifier")
    title: str = Field(description="Note title")
    content: str = Field(description="Note content")
    created_by: UserSummary = Field(description="Note owner")
    collaborators: List[CollaboratorResponse] = Field(
        default_factory=list, description="Collaborators in the order they were added"
    )
    is_archived: bool = Field(default=False, description="Whether the note is archived")
    last_updated: datetime = Field(description="Last content change")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last row update timestamp")


class NoteDetailResponse(NoteResponse):
    """Note as seen by the requesting user."""

    is_owned_by_current_user: bool = Field(description="Whether the requester owns the note")
    user_permission: Permission = Field(description="Requester's effective permission")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Trip Plan",
                "content": "Day 1: fly out.",
                "createdBy": {
                    "id": "456e7890-e89b-12d3-a456-426614174000",
                    "name": "Alice",
                    "email": "alice@example.com",
                },
                "collaborators": [],
                "isArchived": False,
                "lastUpdated": "2025-09-13T11:00:00Z",
                "createdAt": "2025-09-13T10:30:00Z",
                "updatedAt": "2025-09-13T11:00:00Z",
                "isOwnedByCurrentUser": True,
                "userPermission": "write",
            }
        }
    )


class NoteListResponse(CamelModel):
    """Page of notes plus pagination info."""

    notes: List[NoteResponse]
    pagination: PaginationInfo
