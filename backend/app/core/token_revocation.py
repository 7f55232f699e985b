"""
Token Revocation using Redis.

Logged-out tokens are blacklisted until they would have expired anyway.
A per-user flag revokes every token a user holds ("log out everywhere").
"""

import logging

from backend.app.core.config import settings

logger = logging.getLogger("tripcircle.auth")

# Redis key prefixes
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


def _token_ttl_seconds() -> int:
    return settings.access_token_expire_minutes * 60


async def revoke_token(redis, token: str, user_id: str) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        redis: Redis client
        token: The JWT token string to revoke
        user_id: User ID who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis.setex(key, _token_ttl_seconds(), str(user_id))
        return True
    except Exception as e:
        logger.error("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(redis, token: str) -> bool:
    """
    Check if a token has been revoked.

    If Redis is unreachable the token is treated as valid.
    """
    try:
        exists = await redis.exists(f"{TOKEN_BLACKLIST_PREFIX}{token}")
        return exists > 0
    except Exception as e:
        logger.warning("Error checking token revocation: %s", e)
        return False


async def revoke_all_user_tokens(redis, user_id: str) -> bool:
    """
    Revoke all active tokens for a user.

    Args:
        redis: Redis client
        user_id: User ID whose tokens should be revoked

    Returns:
        True if successful
    """
    try:
        key = f"{USER_TOKENS_PREFIX}{user_id}:revoked"
        await redis.setex(key, _token_ttl_seconds(), "1")
        return True
    except Exception as e:
        logger.error("Error revoking all tokens for user %s: %s", user_id, e)
        return False


async def are_user_tokens_revoked(redis, user_id: str) -> bool:
    """Check if all tokens for a user have been revoked."""
    try:
        exists = await redis.exists(f"{USER_TOKENS_PREFIX}{user_id}:revoked")
        return exists > 0
    except Exception as e:
        logger.warning("Error checking user token revocation: %s", e)
        return False
