"""
Rider database model.

Riders apply, are reviewed by an admin and, once active, are reserved
for one parcel at a time.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.sql import func
from zapshift.app.db.session import Base
from zapshift.app.models.rider_enums import RiderStatus, WorkStatus


class Rider(Base):
    """
    Rider model.

    work_status IN_DELIVERY blocks new assignments until the current
    delivery completes.
    """
    __tablename__ = "riders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(30), nullable=True)
    region = Column(String(100), nullable=True)
    district = Column(String(100), nullable=False, index=True)
    bike_registration = Column(String(50), nullable=True)

    status = Column(Enum(RiderStatus), default=RiderStatus.PENDING, nullable=False, index=True)
    work_status = Column(Enum(WorkStatus), default=WorkStatus.IDLE, nullable=False, index=True)

    applied_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    last_assigned_at = Column(DateTime(timezone=True), nullable=True)
    last_delivery_completed_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Rider(id={self.id}, email='{self.email}', status='{self.status.value}', work='{self.work_status.value}')>"
