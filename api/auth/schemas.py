"""
Auth API schemas (request/response models).
"""

from __future__ import annotations

from pydantic import BaseModel


class CredentialsRequest(BaseModel):
    # Both optional so a missing field is reported as a 400 by the service.
    username: str | None = None
    password: str | None = None


class MessageResponse(BaseModel):
    message: str


class TokenResponse(BaseModel):
    token: str
