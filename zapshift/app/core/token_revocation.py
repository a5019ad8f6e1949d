"""
Token Revocation using Redis.

Implements token blacklisting so a signed-out bearer token stops working
before it expires.
"""

import logging
from redis.exceptions import RedisError
import zapshift.app.core.redis_client as redis_store
from zapshift.app.core.config import settings

logger = logging.getLogger("zapshift")

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


async def revoke_token(token: str, email: str) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        email: Email of the caller who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        # Tokens auto-expire anyway, keep the entry only as long as the token lives
        ttl_seconds = settings.access_token_expire_minutes * 60
        await redis_store.redis_client.set(
            f"{TOKEN_BLACKLIST_PREFIX}{token}",
            email,
            ex=ttl_seconds
        )
        return True
    except RedisError as e:
        logger.warning("Error revoking token: %s", e)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Fails open: if Redis is down the request is allowed (availability over
    immediate sign-out).
    """
    try:
        exists = await redis_store.redis_client.exists(f"{TOKEN_BLACKLIST_PREFIX}{token}")
        return exists > 0
    except RedisError as e:
        logger.warning("Error checking token revocation: %s", e)
        return False
