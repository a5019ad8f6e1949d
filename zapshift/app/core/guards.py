"""
Security guards for role-based access control.

Guards are plain predicates over the resolved caller. They compose with
any_of() and turn into FastAPI dependencies with require().
"""

from typing import Callable
from fastapi import Depends
from zapshift.app.core.dependencies import get_current_user
from zapshift.app.core.exceptions import InsufficientPermissionsError
from zapshift.app.models.enums import UserRole

Predicate = Callable[[dict], bool]


def has_role(role: UserRole) -> Predicate:
    """Predicate factory: caller's stored role equals `role`."""
    def check(caller: dict) -> bool:
        return caller.get("role") == role.value
    check.__name__ = f"is_{role.value}"
    return check


is_admin = has_role(UserRole.ADMIN)
is_rider = has_role(UserRole.RIDER)


def any_of(*predicates: Predicate) -> Predicate:
    """Combine predicates; passes if at least one passes."""
    def check(caller: dict) -> bool:
        return any(predicate(caller) for predicate in predicates)
    return check


def require(predicate: Predicate, message: str):
    """
    Dependency factory for capability checks.

    Usage:
        @router.patch("/parcels/{parcel_id}/status")
        async def advance(caller: dict = Depends(require(any_of(is_admin, is_rider), "..."))):
            ...

    Raises:
        InsufficientPermissionsError (403) when the predicate fails
    """
    async def guard(current_user: dict = Depends(get_current_user)) -> dict:
        if not predicate(current_user):
            raise InsufficientPermissionsError(
                message=message,
                details={"role": current_user.get("role")}
            )
        return current_user

    return guard


async def require_authenticated(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency for any verified caller, with or without a stored role."""
    return current_user


require_admin = require(is_admin, "Admin access required")
require_rider = require(is_rider, "Rider access required")
require_admin_or_rider = require(any_of(is_admin, is_rider), "Admin or rider access required")


def enforce_parcel_access(parcel, caller: dict, allow_owner: bool = False) -> None:
    """
    Enforce per-parcel access for non-admin callers.

    Admins pass. Riders pass only for parcels assigned to them. Owners pass
    when allow_owner is set.

    Raises:
        InsufficientPermissionsError (403) if access is denied
    """
    if is_admin(caller):
        return
    if is_rider(caller) and parcel.assigned_rider_email == caller["email"]:
        return
    if allow_owner and parcel.user_email == caller["email"]:
        return
    raise InsufficientPermissionsError(
        message="Access denied. You do not have permission to access this parcel.",
        details={"parcel_id": parcel.id}
    )
