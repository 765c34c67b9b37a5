"""
Service-level errors.

Each error is an HTTPException so services can raise them directly and the
API layer maps them to status codes without extra translation.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        super().__init__(status_code=self.status_code, detail=message or self.default_message)
        self.extra: Dict[str, Any] = {k: v for k, v in extra.items() if v is not None}

    @property
    def message(self) -> str:
        return self.detail

    def to_dict(self, include_debug: bool = False) -> Dict[str, Any]:
        """JSON body for the error response."""
        body: Dict[str, Any] = {"message": self.message}
        if include_debug:
            body.update(self.extra)
        return body


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class InternalError(ServiceError):
    pass
