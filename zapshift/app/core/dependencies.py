"""
Authentication dependencies for FastAPI.

This module resolves the verified caller behind a bearer token and the
role currently stored for them.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from zapshift.app.core.exceptions import AuthenticationError
from zapshift.app.core.jwt import verified_email
from zapshift.app.core.token_revocation import is_token_revoked
from zapshift.app.db.session import get_db
from zapshift.app.models.user import User

# HTTP Bearer security scheme (missing header handled below as 401)
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    FastAPI dependency resolving the authenticated caller.

    Checks:
    1. A bearer token is present
    2. The token signature and expiry are valid and carry an email
    3. The token has not been revoked (logout)
    4. The caller's role is looked up in the users table (real-time)

    Returns:
        dict with "email", "user_id", "role" (None for unknown users) and "token"

    Raises:
        AuthenticationError: 401 if authentication fails for any reason
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    token = credentials.credentials

    # 1. Verify token with the identity provider's key
    email = verified_email(token)
    if email is None:
        raise AuthenticationError("Could not validate credentials")

    # 2. Check if this specific token has been revoked
    if await is_token_revoked(token):
        raise AuthenticationError("Token has been revoked")

    # 3. Role is authoritative in the store, never in the token
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    return {
        "email": email,
        "user_id": user.id if user else None,
        "role": user.role.value if user else None,
        "token": token,
    }
