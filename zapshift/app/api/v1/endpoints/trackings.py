"""
Tracking API Endpoints.

Manual tracking entries and the public tracking history of a parcel.
"""

from fastapi import APIRouter, Depends, status, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from zapshift.app.db.session import get_db
from zapshift.app.models.parcel import Parcel
from zapshift.app.schemas.tracking import (
    TrackingEventCreate, TrackingEventResponse, TrackingHistoryResponse
)
from zapshift.app.core.exceptions import ResourceNotFoundError
from zapshift.app.core.guards import require_admin_or_rider, enforce_parcel_access
from zapshift.app.services.tracking import add_tracking_event, get_tracking_history

router = APIRouter(prefix="/trackings", tags=["Tracking"])


@router.post("", response_model=TrackingEventResponse, status_code=status.HTTP_201_CREATED)
async def create_tracking_event(
    event: TrackingEventCreate,
    current_user: dict = Depends(require_admin_or_rider),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a free-text tracking event to a parcel.

    Admins may annotate any parcel; riders only the parcels assigned to them.
    The parcel's delivery status is not changed.
    """
    result = await db.execute(select(Parcel).where(Parcel.tracking_id == event.tracking_id))
    parcel = result.scalar_one_or_none()
    if not parcel:
        raise ResourceNotFoundError("Parcel", event.tracking_id)

    enforce_parcel_access(parcel, current_user)

    record = add_tracking_event(
        db,
        parcel,
        event.status,
        updated_by=current_user["email"],
        location=event.location,
        message=event.message
    )
    await db.commit()
    await db.refresh(record)

    return TrackingEventResponse.model_validate(record)


@router.get("/{tracking_id}", response_model=TrackingHistoryResponse)
async def get_tracking(
    tracking_id: str = Path(..., description="Parcel tracking ID"),
    db: AsyncSession = Depends(get_db)
):
    """Tracking history for a tracking id, oldest first. No sign-in needed."""
    events = await get_tracking_history(db, tracking_id)
    if not events:
        raise ResourceNotFoundError("Tracking", tracking_id)

    return TrackingHistoryResponse(
        tracking_id=tracking_id,
        events=[TrackingEventResponse.model_validate(e) for e in events]
    )
