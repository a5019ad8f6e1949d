"""
Parcel database model.

A parcel is booked by a sender, paid for, handed to a rider and tracked
until delivery and rider cash-out.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum
from sqlalchemy.sql import func
from zapshift.app.db.session import Base
from zapshift.app.models.parcel_enums import DeliveryStatus, PaymentStatus, CashOutStatus, ParcelType


class Parcel(Base):
    """
    Parcel model for the delivery lifecycle.

    Assignment fields (assigned_rider_*) are filled when the parcel leaves
    NOT_COLLECTED and are kept afterwards to identify the earning rider.
    """
    __tablename__ = "parcels"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    tracking_id = Column(String(32), unique=True, nullable=False, index=True)

    # Ownership
    user_email = Column(String(255), nullable=False, index=True)

    # Contents
    title = Column(String(200), nullable=False)
    parcel_type = Column(Enum(ParcelType), default=ParcelType.NON_DOCUMENT, nullable=False)
    weight_kg = Column(Float, nullable=True)

    # Route
    sender_name = Column(String(100), nullable=False)
    sender_district = Column(String(100), nullable=False, index=True)
    sender_address = Column(String(500), nullable=True)
    receiver_name = Column(String(100), nullable=False)
    receiver_district = Column(String(100), nullable=False, index=True)
    receiver_address = Column(String(500), nullable=True)

    # Declared cost in the currency's smallest unit
    cost = Column(Integer, nullable=False)

    # Lifecycle
    delivery_status = Column(Enum(DeliveryStatus), default=DeliveryStatus.NOT_COLLECTED, nullable=False, index=True)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.UNPAID, nullable=False, index=True)

    # Assignment
    assigned_rider_id = Column(Integer, nullable=True, index=True)
    assigned_rider_name = Column(String(100), nullable=True)
    assigned_rider_email = Column(String(255), nullable=True, index=True)
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    picked_up_at = Column(DateTime(timezone=True), nullable=True)
    delivered_at = Column(DateTime(timezone=True), nullable=True)

    # Rider payout
    cash_out_status = Column(Enum(CashOutStatus), nullable=True)
    cash_out_at = Column(DateTime(timezone=True), nullable=True)
    rider_earning = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<Parcel(id={self.id}, tracking_id='{self.tracking_id}', status='{self.delivery_status.value}')>"
