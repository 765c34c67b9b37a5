"""Notes API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.auth import CurrentUser
from ..core.schemas.common import ErrorResponse, MessageResponse
from ..core.schemas.notes import (
    NoteCreate,
    NoteDetailResponse,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
)
from ..core.services import NoteService
from ..core.services.notification_service import NotificationDispatcher, get_notification_dispatcher
from ..database import get_db_session
from ..middleware.auth import get_current_user

router = APIRouter(
    prefix="/notes",
    tags=["notes"],
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def _as_int(value: Optional[str]) -> Optional[int]:
    """Lenient query parsing; junk falls back to the service defaults."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_note_service(
    session: AsyncSession = Depends(get_db_session),
    notifier: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> NoteService:
    return NoteService(session, notifier=notifier)


@router.get("/", response_model=NoteListResponse)
async def list_notes(
    page: Optional[str] = Query(None, description="Page number, defaults to 1"),
    limit: Optional[str] = Query(None, description="Page size, defaults to the configured size"),
    show_archived: bool = Query(False, alias="showArchived"),
    current_user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
):
    """List notes the user owns or collaborates on."""
    return await note_service.list_notes(
        current_user,
        page=_as_int(page) or 1,
        limit=_as_int(limit),
        show_archived=show_archived,
    )


@router.get("/{note_id}", response_model=NoteDetailResponse)
async def get_note(
    note_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
):
    """Get a specific note."""
    return await note_service.get_note(note_id, current_user)


@router.post("/", response_model=NoteDetailResponse, status_code=201)
async def create_note(
    request: NoteCreate,
    current_user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
):
    """Create a new note."""
    return await note_service.create_note(current_user, request)


@router.patch("/{note_id}", response_model=NoteDetailResponse)
async def update_note(
    note_id: UUID,
    request: NoteUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
):
    """Update a note's title, content or archive flag."""
    return await note_service.update_note(note_id, current_user, request)


@router.delete("/{note_id}", response_model=MessageResponse)
async def delete_note(
    note_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
):
    """Delete a note."""
    return await note_service.delete_note(note_id, current_user)


@router.post("/{note_id}/share", response_model=NoteResponse)
async def share_note(
    note_id: UUID,
    request: ShareRequest,
    current_user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
):
    """Share a note with another user."""
    return await note_service.share_note(note_id, current_user, request)


@router.delete("/{note_id}/collaborators/{user_id}", response_model=NoteResponse)
async def remove_collaborator(
    note_id: UUID,
    user_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    note_service: NoteService = Depends(get_note_service),
):
    """Revoke a collaborator's access."""
    return await note_service.remove_collaborator(note_id, current_user, user_id)
