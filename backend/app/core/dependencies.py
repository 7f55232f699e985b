"""
Authentication dependencies for FastAPI.

This module resolves the caller identity from the bearer token. Every
failure surfaces as ``UnauthorizedError`` (401) before any handler logic.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import UnauthorizedError
from backend.app.core.jwt import decode_access_token
from backend.app.core.redis_client import get_redis
from backend.app.core.token_revocation import is_token_revoked, are_user_tokens_revoked
from backend.app.db.session import get_db
from backend.app.models.user import User

# HTTP Bearer security scheme; a missing header is handled below, not by FastAPI
security = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Return the raw bearer token or raise 401."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing bearer token")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Checks:
    1. Validates JWT token signature and expiry
    2. Checks if token has been explicitly revoked
    3. Checks if all user tokens have been revoked
    4. Verifies the user still exists

    Args:
        token: Bearer token from the Authorization header
        db: Database session for the user lookup
        redis: Redis client holding the revocation list

    Returns:
        Decoded token payload; ``payload["user_id"]`` is the caller identity

    Raises:
        UnauthorizedError: 401 if authentication fails for any reason
    """
    # 1. Decode and validate JWT
    payload = decode_access_token(token)
    if payload is None:
        raise UnauthorizedError("Could not validate credentials")

    user_id = payload.get("user_id")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")

    # 2. Specific token revoked (logout)
    if await is_token_revoked(redis, token):
        raise UnauthorizedError("Token has been revoked")

    # 3. All user tokens revoked (logout everywhere)
    if await are_user_tokens_revoked(redis, user_id):
        raise UnauthorizedError("User access has been revoked")

    # 4. User must still exist
    result = await db.execute(select(User.id).where(User.id == user_id))
    if result.scalar_one_or_none() is None:
        raise UnauthorizedError("User not found")

    return payload
