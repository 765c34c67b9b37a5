"""Note repository for database operations."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, exists, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.collaborator import NoteCollaborator, Permission
from ..models.note import Note

logger = logging.getLogger(__name__)


class NoteRepository:
    """Repository for note database operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _with_relations(stmt):
        """Eager-load owner and collaborators (with their users)."""
        return stmt.options(
            selectinload(Note.owner),
            selectinload(Note.collaborators).selectinload(NoteCollaborator.user),
        )

    @staticmethod
    def _accessible_by(user_id: UUID, archived: bool):
        """Notes the user owns or collaborates on, filtered by archive flag."""
        shared_ids = select(NoteCollaborator.note_id).where(NoteCollaborator.user_id == user_id)
        return (
            or_(Note.created_by == user_id, Note.id.in_(shared_ids)),
            Note.is_archived == archived,
        )

    async def create_note(self, note_data: dict) -> Note:
        """Create new note."""
        note = Note(**note_data)
        self.session.add(note)
        await self.session.commit()
        return await self.get_by_id(note.id)

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        """Get note by ID with owner and collaborators resolved."""
        stmt = (
            self._with_relations(select(Note).where(Note.id == note_id))
            # pick up collaborator rows written outside the ORM collection
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def has_accessible_notes(self, user_id: UUID, archived: bool = False) -> bool:
        """Cheap existence check used before counting."""
        stmt = select(exists().where(*self._accessible_by(user_id, archived)))
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def count_accessible_notes(self, user_id: UUID, archived: bool = False) -> int:
        stmt = select(func.count(Note.id)).where(*self._accessible_by(user_id, archived))
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def list_accessible_notes(
        self,
        user_id: UUID,
        archived: bool = False,
        page: int = 1,
        per_page: int = 10,
    ) -> List[Note]:
        """List a page of accessible notes, most recently updated first."""
        offset = (page - 1) * per_page

        stmt = (
            self._with_relations(select(Note).where(*self._accessible_by(user_id, archived)))
            # id breaks ties so pages never overlap
            .order_by(desc(Note.last_updated), desc(Note.id))
            .offset(offset)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_note(self, note: Note, update_data: dict) -> Note:
        """Apply field updates and return the reloaded note."""
        for key, value in update_data.items():
            setattr(note, key, value)

        await self.session.commit()
        return await self.get_by_id(note.id)

    async def delete_note(self, note: Note) -> None:
        """Delete note; collaborator rows go with it."""
        note_id = note.id
        await self.session.delete(note)
        await self.session.commit()
        logger.info(f"Deleted note {note_id}")

    async def upsert_collaborator(
        self, note_id: UUID, user_id: UUID, permission: Permission
    ) -> None:
        """
        Grant a user access to a note, overwriting any existing grant.

        Runs as an UPDATE first and INSERTs only when no row matched. If a
        concurrent share inserts the same (note, user) pair in between, the
        unique constraint fires and the UPDATE is retried, so the entry is
        never duplicated and no grant is lost.
        """
        update_stmt = (
            update(NoteCollaborator)
            .where(NoteCollaborator.note_id == note_id, NoteCollaborator.user_id == user_id)
            .values(permission=permission.value)
        )
        result = await self.session.execute(update_stmt)
        if result.rowcount:
            await self.session.commit()
            return

        self.session.add(
            NoteCollaborator(note_id=note_id, user_id=user_id, permission=permission.value)
        )
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info(f"Collaborator {user_id} on note {note_id} inserted concurrently, updating")
            await self.session.execute(update_stmt)
            await self.session.commit()

    async def remove_collaborator(self, note_id: UUID, user_id: UUID) -> bool:
        """Remove a user's grant. Returns False when there was none."""
        stmt = delete(NoteCollaborator).where(
            NoteCollaborator.note_id == note_id, NoteCollaborator.user_id == user_id
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
