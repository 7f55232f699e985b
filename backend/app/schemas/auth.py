"""
Authentication Pydantic schemas.

Defines request and response schemas for the auth helper endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from backend.app.schemas.base import CamelModel


class DevTokenRequest(CamelModel):
    """
    Schema for minting a development token.

    The user mirror row is created when it does not exist yet.
    """
    user_id: str = Field(..., min_length=1, max_length=64, description="Identity provider user id")
    email: str = Field(..., min_length=3, max_length=255)
    name: Optional[str] = Field(None, max_length=100)


class TokenResponse(CamelModel):
    """Schema for JWT token response."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: str = Field(..., description="User ID")


class UserResponse(CamelModel):
    """Schema for the current user."""
    id: str
    email: str
    name: Optional[str] = None
    created_at: datetime


class LogoutResponse(CamelModel):
    revoked: bool
    all_sessions: bool = False
