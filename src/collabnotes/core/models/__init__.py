"""
Database models for CollabNotes.

SQLAlchemy ORM models for the collaborative note store. All models are
used through async sessions.

Models included:
    - User: account referenced by notes (name/email only)
    - Note: note content owned by a single user
    - NoteCollaborator: per-user read/write grant on a note
"""

from .base import BaseModel
from .collaborator import NoteCollaborator, Permission
from .note import Note
from .user import User

__all__ = [
    "BaseModel",
    "User",
    "Note",
    "NoteCollaborator",
    "Permission",
]
