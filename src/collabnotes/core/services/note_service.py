"""Note service implementation."""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import Settings, get_settings
from ..exceptions import ForbiddenError, InternalError, NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.collaborator import Permission
from ..models.note import Note
from ..repositories.note_repository import NoteRepository
from ..repositories.user_repository import UserRepository
from ..schemas.auth import CurrentUser
from ..schemas.common import MessageResponse, PaginationInfo
from ..schemas.notes import (
    CollaboratorResponse,
    NoteCreate,
    NoteDetailResponse,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
    ShareRequest,
    UserSummary,
)
from .interfaces import INoteService
from .notification_service import NotificationDispatcher, get_notification_dispatcher

logger = logging.getLogger(__name__)


class NoteService(INoteService):
    """Note service implementation.

    Access rules:
    - the owner can do everything
    - a ``write`` collaborator can read and update
    - a ``read`` collaborator can only read
    - anyone else gets 403, never 404, for an existing note
    """

    def __init__(
        self,
        session: AsyncSession,
        notifier: Optional[NotificationDispatcher] = None,
        settings: Optional[Settings] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.note_repo = NoteRepository(session)
        # Used to resolve share targets by email
        self.user_repo = UserRepository(session)
        self.notifier = notifier or get_notification_dispatcher()

    async def list_notes(
        self,
        user: CurrentUser,
        page: int = 1,
        limit: Optional[int] = None,
        show_archived: bool = False,
    ) -> NoteListResponse:
        """List notes the user owns or collaborates on."""
        if page < 1:
            page = 1
        if limit is None or limit < 1 or limit > self.settings.max_page_size:
            limit = self.settings.default_page_size

        async with self._persistence_guard("fetching notes", user):
            has_notes = await self.note_repo.has_accessible_notes(user.id, show_archived)
            if not has_notes and page == 1:
                logger.debug(f"No notes for user {user.id}, returning empty result")
                return NoteListResponse(notes=[], pagination=PaginationInfo.empty())

            total = await self.note_repo.count_accessible_notes(user.id, show_archived)
            notes = await self.note_repo.list_accessible_notes(
                user.id, show_archived, page, limit
            )

        return NoteListResponse(
            notes=[NoteResponse(**self._note_fields(note)) for note in notes],
            pagination=PaginationInfo.create(page=page, per_page=limit, total=total),
        )

    async def get_note(self, note_id: UUID, user: CurrentUser) -> NoteDetailResponse:
        """Get note by ID if the user owns it or collaborates on it."""
        async with self._persistence_guard("fetching note", user, note_id):
            note = await self._get_note_or_404(note_id)

        if not note.can_read(user.id):
            raise self._forbidden("Access denied", note, user)

        return self._note_to_detail(note, user.id)

    async def create_note(self, user: CurrentUser, request: NoteCreate) -> NoteDetailResponse:
        """Create new note owned by the user."""
        title = (request.title or "").strip()
        if not title:
            raise ValidationError("Title is required")

        note_data = {
            "title": title,
            "content": request.content or "",
            "created_by": user.id,
            "last_updated": utcnow(),
        }

        async with self._persistence_guard("creating note", user):
            note = await self.note_repo.create_note(note_data)

        logger.info("Note created", extra={"note_id": str(note.id), "user_id": str(user.id)})
        return self._note_to_detail(note, user.id)

    async def update_note(
        self, note_id: UUID, user: CurrentUser, request: NoteUpdate
    ) -> NoteDetailResponse:
        """Update title/content/archive flag. Needs write permission."""
        if request.title is not None and not request.title.strip():
            raise ValidationError("Title is required")

        async with self._persistence_guard("updating note", user, note_id):
            note = await self._get_note_or_404(note_id)

            if not note.can_write(user.id):
                raise self._forbidden("Write access denied", note, user)

            # Only update fields that are provided
            update_data: Dict[str, Any] = {}
            if request.title is not None:
                update_data["title"] = request.title.strip()
            if request.content is not None:
                update_data["content"] = request.content
            if request.is_archived is not None:
                update_data["is_archived"] = request.is_archived
            update_data["last_updated"] = utcnow()

            updated = await self.note_repo.update_note(note, update_data)

        logger.info(
            "Note updated",
            extra={
                "note_id": str(note_id),
                "user_id": str(user.id),
                "fields": sorted(k for k in update_data if k != "last_updated"),
            },
        )

        self._notify(
            updated.id,
            f'Note "{updated.title}" was updated by {user.name}',
            updated.participant_ids(),
            exclude_user_id=user.id,
            kind="note_updated",
        )

        return self._note_to_detail(updated, user.id)

    async def delete_note(self, note_id: UUID, user: CurrentUser) -> MessageResponse:
        """Delete note. Owner only."""
        async with self._persistence_guard("deleting note", user, note_id):
            note = await self._get_note_or_404(note_id)

            if not note.is_owned_by(user.id):
                raise self._forbidden("Only the creator can delete the note", note, user)

            await self.note_repo.delete_note(note)

        logger.info("Note deleted", extra={"note_id": str(note_id), "user_id": str(user.id)})
        return MessageResponse(message="Note deleted successfully")

    async def share_note(
        self, note_id: UUID, user: CurrentUser, request: ShareRequest
    ) -> NoteResponse:
        """Grant another user read or write access. Owner only.

        Sharing again with the same user overwrites their permission
        instead of adding a second entry.
        """
        try:
            permission = Permission(request.permission)
        except ValueError:
            raise ValidationError("Invalid permission type")

        async with self._persistence_guard("sharing note", user, note_id):
            note = await self._get_note_or_404(note_id)

            if not note.is_owned_by(user.id):
                raise self._forbidden("Only the creator can share the note", note, user)

            target = await self.user_repo.get_by_email(request.email)
            if not target:
                raise NotFoundError("User not found")

            target_id = target.id
            if note.is_owned_by(target_id):
                raise ValidationError("Cannot share a note with its owner")

            await self.note_repo.upsert_collaborator(note.id, target_id, permission)
            note = await self._get_note_or_404(note_id)

        logger.info(
            "Note shared",
            extra={
                "note_id": str(note_id),
                "user_id": str(user.id),
                "collaborator_id": str(target_id),
                "permission": permission.value,
            },
        )

        # only the new collaborator hears about it
        self._notify(
            note.id,
            f'You were given {permission.value} access to "{note.title}" by {user.name}',
            [target_id],
            kind="note_shared",
        )

        return NoteResponse(**self._note_fields(note))

    async def remove_collaborator(
        self, note_id: UUID, user: CurrentUser, collaborator_id: UUID
    ) -> NoteResponse:
        """Revoke a collaborator's access. Owner only."""
        async with self._persistence_guard("removing collaborator", user, note_id):
            note = await self._get_note_or_404(note_id)

            if not note.is_owned_by(user.id):
                raise self._forbidden("Only the creator can manage collaborators", note, user)

            removed = await self.note_repo.remove_collaborator(note_id, collaborator_id)
            if not removed:
                raise NotFoundError("Collaborator not found")

            note = await self._get_note_or_404(note_id)

        logger.info(
            "Collaborator removed",
            extra={
                "note_id": str(note_id),
                "user_id": str(user.id),
                "collaborator_id": str(collaborator_id),
            },
        )
        return NoteResponse(**self._note_fields(note))

    async def _get_note_or_404(self, note_id: UUID) -> Note:
        note = await self.note_repo.get_by_id(note_id)
        if not note:
            raise NotFoundError("Note not found")
        return note

    @asynccontextmanager
    async def _persistence_guard(
        self, operation: str, user: CurrentUser, note_id: Optional[UUID] = None
    ):
        """Turn database failures into InternalError, logging the context."""
        try:
            yield
        except SQLAlchemyError as e:
            context = {
                "operation": operation,
                "note_id": str(note_id) if note_id else None,
                "user_id": str(user.id),
            }
            logger.error(f"Database error while {operation}", extra=context, exc_info=e)
            try:
                await self.session.rollback()
            except SQLAlchemyError as rollback_error:
                logger.warning(f"Rollback failed after {operation}: {rollback_error}")
            raise InternalError(f"Error {operation}", error=str(e)) from e

    def _forbidden(self, message: str, note: Note, user: CurrentUser) -> ForbiddenError:
        """Build a 403 and log the denial.

        The attached info only describes the requester; other
        collaborators are never exposed.
        """
        permission = note.permission_for(user.id)
        permission_info = {
            "requesterId": str(user.id),
            "isOwner": note.is_owned_by(user.id),
            "requesterPermission": permission.value if permission else None,
        }
        logger.warning(
            message,
            extra={"note_id": str(note.id), "user_id": str(user.id), **permission_info},
        )
        return ForbiddenError(message, permissionInfo=permission_info)

    def _notify(
        self,
        note_id: UUID,
        message: str,
        recipients: Iterable[UUID],
        exclude_user_id: Optional[UUID] = None,
        kind: str = "note_updated",
    ) -> None:
        """Hand off to the dispatcher; a failure here never fails the request."""
        try:
            self.notifier.notify(
                note_id, message, recipients, exclude_user_id=exclude_user_id, kind=kind
            )
        except Exception as e:
            logger.error(
                f"Failed to queue notification: {e}",
                extra={"note_id": str(note_id), "kind": kind},
            )

    def _note_fields(self, note: Note) -> Dict[str, Any]:
        """Response fields shared by every note representation."""
        return {
            "id": note.id,
            "title": note.title,
            "content": note.content or "",
            "created_by": UserSummary.model_validate(note.owner),
            "collaborators": [
                CollaboratorResponse(
                    user_id=entry.user_id,
                    user=UserSummary.model_validate(entry.user),
                    permission=entry.permission,
                )
                for entry in note.collaborators.values()
            ],
            "is_archived": bool(note.is_archived),
            "last_updated": note.last_updated,
            "created_at": note.created_at,
            "updated_at": note.updated_at,
        }

    def _note_to_detail(self, note: Note, user_id: UUID) -> NoteDetailResponse:
        # permission_for is only None for users that failed the access check
        permission = note.permission_for(user_id) or Permission.READ
        return NoteDetailResponse(
            **self._note_fields(note),
            is_owned_by_current_user=note.is_owned_by(user_id),
            user_permission=permission,
        )
