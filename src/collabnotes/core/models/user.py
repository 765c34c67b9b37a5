"""
User model.

Accounts are created and authenticated elsewhere; notes only need the
display name and email of the people they are shared with.
"""

from sqlalchemy import Boolean, CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel


class User(BaseModel):
    """User account referenced by notes and collaborator entries."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("length(name) <= 100", name="ck_users_name_len"),
        Index("idx_users_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<User(email='{self.email}')>"

    @staticmethod
    def normalize_email(email: str) -> str:
        """Emails are matched case-insensitively."""
        return email.strip().lower()
