"""
User API Endpoints.

Registration of signed-in callers and admin role management.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from zapshift.app.db.session import get_db
from zapshift.app.models.user import User
from zapshift.app.models.enums import UserRole
from zapshift.app.schemas.user import (
    UserUpsert, UserResponse, UserUpsertResponse, RoleResponse, RoleUpdateRequest
)
from zapshift.app.core.exceptions import ResourceNotFoundError
from zapshift.app.core.guards import require_authenticated, require_admin
from zapshift.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserUpsertResponse)
async def upsert_current_user(
    payload: UserUpsert,
    current_user: dict = Depends(require_authenticated),
    db: AsyncSession = Depends(get_db)
):
    """
    Register the caller on first sign-in, refresh last login otherwise.

    New users always start with the USER role; roles are only changed by
    admins or by rider approval.
    """
    now = datetime.now(timezone.utc)
    result = await db.execute(select(User).where(User.email == current_user["email"]))
    user = result.scalar_one_or_none()
    created = user is None

    if created:
        user = User(
            email=current_user["email"],
            name=payload.name,
            role=UserRole.USER,
            last_login_at=now
        )
        db.add(user)
    else:
        user.last_login_at = now
        if payload.name:
            user.name = payload.name

    await db.commit()
    await db.refresh(user)

    return UserUpsertResponse(user=UserResponse.model_validate(user), created=created)


@router.get("/me/role", response_model=RoleResponse)
async def get_my_role(current_user: dict = Depends(require_authenticated)):
    """Role currently stored for the caller (null if never registered)."""
    return RoleResponse(email=current_user["email"], role=current_user["role"])


@router.get("/search", response_model=UserResponse)
async def search_user(
    email: str = Query(..., min_length=3, description="Exact email"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Look up a user by email (admin only)."""
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    user = result.scalar_one_or_none()
    if not user:
        raise ResourceNotFoundError("User", email)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int = Path(..., description="User ID"),
    request: RoleUpdateRequest = ...,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Set a user's role (admin only). Takes effect on the user's next request."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise ResourceNotFoundError("User", user_id)

    previous = user.role
    user.role = request.role

    await log_event(
        db=db,
        action=AuditAction.ROLE_CHANGED,
        actor_email=admin["email"],
        target_type="user",
        target_id=user.id,
        metadata={"from": previous.value, "to": request.role.value},
        commit=False
    )
    await db.commit()
    await db.refresh(user)

    return UserResponse.model_validate(user)
