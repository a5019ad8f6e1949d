"""
Tracking service.

Appends tracking events for parcels and reads a parcel's history.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from zapshift.app.models.parcel import Parcel
from zapshift.app.models.tracking_event import TrackingEvent

# Default messages for lifecycle transitions
STATUS_MESSAGES = {
    "rider-assigned": "Rider assigned to parcel",
    "in-transit": "Parcel picked up by rider",
    "delivered": "Parcel delivered to receiver",
    "service-center-delivered": "Parcel delivered to service center",
}


def add_tracking_event(
    db: AsyncSession,
    parcel: Parcel,
    status: str,
    updated_by: Optional[str] = None,
    location: Optional[str] = None,
    message: Optional[str] = None
) -> TrackingEvent:
    """
    Stage a tracking event in the caller's transaction.

    Nothing is flushed here; the event is written with the caller's commit
    so it never outlives a rolled-back transition.
    """
    event = TrackingEvent(
        parcel_id=parcel.id,
        tracking_id=parcel.tracking_id,
        status=status,
        location=location,
        message=message or STATUS_MESSAGES.get(status),
        updated_by=updated_by
    )
    db.add(event)
    return event


async def get_tracking_history(db: AsyncSession, tracking_id: str) -> list[TrackingEvent]:
    """Events for a tracking id, oldest first."""
    result = await db.execute(
        select(TrackingEvent)
        .where(TrackingEvent.tracking_id == tracking_id)
        .order_by(TrackingEvent.timestamp.asc(), TrackingEvent.id.asc())
    )
    return result.scalars().all()
