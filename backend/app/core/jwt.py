"""
Bearer token encoding for caller identity.

Tokens carry ``user_id`` (the caller's ``auth_user.id``) and ``sub``. In
production they come from the identity provider; ``create_access_token``
exists for the debug token endpoint, the seed script and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from backend.app.core.config import settings


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign ``claims`` with an ``exp`` of now + ``expires_delta``.

    Without ``expires_delta`` the token lives ACCESS_TOKEN_EXPIRE_MINUTES,
    the same span revocation entries are kept in Redis.
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {**claims, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the verified claims, or None for a bad signature, malformed or expired token."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
