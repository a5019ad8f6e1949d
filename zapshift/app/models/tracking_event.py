"""
Tracking Event database model.

Append-only log of what happened to a parcel and where.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from zapshift.app.db.session import Base


class TrackingEvent(Base):
    """Tracking event model. Rows are never updated or deleted."""
    __tablename__ = "tracking_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    parcel_id = Column(Integer, ForeignKey('parcels.id', ondelete="SET NULL"), nullable=True, index=True)
    tracking_id = Column(String(32), nullable=False, index=True)

    status = Column(String(50), nullable=False)
    location = Column(String(200), nullable=True)
    message = Column(String(500), nullable=True)
    updated_by = Column(String(255), nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<TrackingEvent(tracking_id='{self.tracking_id}', status='{self.status}')>"
