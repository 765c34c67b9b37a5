"""
Service layer interfaces and implementations.
"""

from .interfaces import IHealthService, INoteService
from .health_service import HealthService
from .note_service import NoteService
from .notification_service import (
    NoteNotification,
    NotificationDispatcher,
    get_notification_dispatcher,
)

__all__ = [
    # Interfaces
    "INoteService",
    "IHealthService",
    # Implementations
    "NoteService",
    "HealthService",
    "NotificationDispatcher",
    "NoteNotification",
    "get_notification_dispatcher",
]
