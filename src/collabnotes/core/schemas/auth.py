"""
Authenticated caller identity.

Tokens are issued by the external auth service; the API resolves the
token's subject to a user row and passes this object explicitly into
every service call.
"""

import uuid

from pydantic import BaseModel, ConfigDict


class CurrentUser(BaseModel):
    """The user making the request."""

    id: uuid.UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True, frozen=True)
