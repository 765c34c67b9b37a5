"""
CollabNotes Backend - collaborative note taking

REST API for notes with owner/collaborator permissions and real-time
update notifications over Redis.
"""

__version__ = "1.0.0"
