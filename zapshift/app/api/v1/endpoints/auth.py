"""
Authentication API endpoints.

Sign-in happens at the identity provider; this service only ends sessions.
"""

from fastapi import APIRouter, Depends

from zapshift.app.core.dependencies import get_current_user
from zapshift.app.core.token_revocation import revoke_token

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/logout")
async def logout(current_user: dict = Depends(get_current_user)):
    """
    Revoke the bearer token used for this request.

    Later requests with the same token get 401 until it would have expired.
    """
    revoked = await revoke_token(current_user["token"], current_user["email"])
    return {
        "success": revoked,
        "message": "Signed out" if revoked else "Sign-out could not be recorded, try again",
    }
