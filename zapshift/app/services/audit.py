"""
Audit logging service for tracking admin actions and parcel state changes.

Provides centralized logging for accountability and dispute handling.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from zapshift.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    ROLE_CHANGED = "ROLE_CHANGED"

    # Parcels
    PARCEL_CREATED = "PARCEL_CREATED"
    PARCEL_DELETED = "PARCEL_DELETED"
    RIDER_ASSIGNED = "RIDER_ASSIGNED"
    PARCEL_STATUS_CHANGED = "PARCEL_STATUS_CHANGED"
    PARCEL_CASHED_OUT = "PARCEL_CASHED_OUT"

    # Riders
    RIDER_APPLIED = "RIDER_APPLIED"
    RIDER_APPROVED = "RIDER_APPROVED"
    RIDER_REJECTED = "RIDER_REJECTED"

    # Payments
    PAYMENT_RECORDED = "PAYMENT_RECORDED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_email: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
    commit: bool = True
) -> AuditLog:
    """
    Write an entry to the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_email: Email of the caller performing the action
        target_type: Kind of record acted upon ("parcel", "rider", "user", ...)
        target_id: ID of the record acted upon
        metadata: Additional context as JSON
        commit: Commit immediately; pass False to join the caller's transaction

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_email=actor_email,
        action=action,
        target_type=target_type,
        target_id=target_id,
        meta_data=metadata
    )

    db.add(audit_log)
    if commit:
        await db.commit()
        await db.refresh(audit_log)

    return audit_log

