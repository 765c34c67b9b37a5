# Note model for user content
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, attribute_keyed_dict, mapped_column, relationship

from .base import BaseModel, utcnow
from .collaborator import NoteCollaborator, Permission
from .types import GUID

if TYPE_CHECKING:
    from .user import User


class Note(BaseModel):
    """Note owned by one user and optionally shared with collaborators."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # bumped on every mutation, drives list ordering
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # owner reference, never changes
    created_by: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    owner: Mapped["User"] = relationship(
        "User",
        lazy="selectin",
        doc="User who created and owns this note",
    )

    # keyed by user id so a user can only ever appear once
    collaborators: Mapped[Dict[uuid.UUID, NoteCollaborator]] = relationship(
        "NoteCollaborator",
        back_populates="note",
        collection_class=attribute_keyed_dict("user_id"),
        cascade="all, delete-orphan",
        order_by="NoteCollaborator.created_at",
        lazy="selectin",
        doc="Collaborators in the order they were added",
    )

    __table_args__ = (
        Index("idx_notes_created_by", "created_by"),
        Index("idx_notes_created_by_archived_updated", "created_by", "is_archived", "last_updated"),
        Index("idx_notes_last_updated", "last_updated"),
        CheckConstraint("length(title) <= 200", name="ck_notes_title_len"),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<Note(title='{truncated}', created_by={self.created_by})>"

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        """Check if this note is owned by the specified user."""
        return self.created_by == user_id

    def permission_for(self, user_id: uuid.UUID) -> Optional[Permission]:
        """
        Resolve what the given user may do with this note.

        Returns:
            Permission.WRITE for the owner, the stored permission for a
            collaborator, or None when the user has no access at all.
        """
        if self.is_owned_by(user_id):
            return Permission.WRITE
        entry = self.collaborators.get(user_id)
        if entry is None:
            return None
        return Permission(entry.permission)

    def can_read(self, user_id: uuid.UUID) -> bool:
        return self.permission_for(user_id) is not None

    def can_write(self, user_id: uuid.UUID) -> bool:
        return self.permission_for(user_id) == Permission.WRITE

    def participant_ids(self) -> List[uuid.UUID]:
        """Owner followed by collaborators, in insertion order."""
        return [self.created_by, *self.collaborators.keys()]
