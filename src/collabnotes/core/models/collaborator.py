# Collaborator entries granting other users access to a note
import uuid
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from .types import GUID

if TYPE_CHECKING:
    from .note import Note
    from .user import User


class Permission(str, Enum):
    """Access level granted to a collaborator."""

    READ = "read"
    WRITE = "write"


class NoteCollaborator(BaseModel):
    """One user's permission on one note."""

    __tablename__ = "note_collaborators"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    permission: Mapped[str] = mapped_column(
        String(20), default=Permission.READ.value, nullable=False
    )

    note: Mapped["Note"] = relationship("Note", back_populates="collaborators")
    user: Mapped["User"] = relationship("User", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("note_id", "user_id", name="uq_note_collaborators_note_user"),
        CheckConstraint(
            "permission IN ('read', 'write')", name="ck_note_collaborators_permission"
        ),
        Index("idx_note_collaborators_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<NoteCollaborator(note_id={self.note_id}, user_id={self.user_id}, permission={self.permission})>"
