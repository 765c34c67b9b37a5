"""
Service interfaces for CollabNotes.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from uuid import UUID

from ..schemas.auth import CurrentUser
from ..schemas.common import HealthCheckResponse, MessageResponse
from ..schemas.notes import (
    NoteCreate,
    NoteDetailResponse,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
)


class INoteService(ABC):
    """Note access and mutation service."""

    @abstractmethod
    async def list_notes(
        self,
        user: CurrentUser,
        page: int = 1,
        limit: Optional[int] = None,
        show_archived: bool = False,
    ) -> NoteListResponse:
        """List owned and shared notes with pagination."""
        pass

    @abstractmethod
    async def get_note(self, note_id: UUID, user: CurrentUser) -> NoteDetailResponse:
        """Get note by ID."""
        pass

    @abstractmethod
    async def create_note(self, user: CurrentUser, request: NoteCreate) -> NoteDetailResponse:
        """Create new note."""
        pass

    @abstractmethod
    async def update_note(
        self, note_id: UUID, user: CurrentUser, request: NoteUpdate
    ) -> NoteDetailResponse:
        """Partially update a note."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, user: CurrentUser) -> MessageResponse:
        """Delete note."""
        pass

    @abstractmethod
    async def share_note(
        self, note_id: UUID, user: CurrentUser, request: ShareRequest
    ) -> NoteResponse:
        """Add or update a collaborator."""
        pass

    @abstractmethod
    async def remove_collaborator(
        self, note_id: UUID, user: CurrentUser, collaborator_id: UUID
    ) -> NoteResponse:
        """Remove a collaborator."""
        pass


class IHealthService(ABC):
    """Health check service."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        pass

    @abstractmethod
    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        pass
