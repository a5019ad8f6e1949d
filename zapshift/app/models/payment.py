"""
Payment database model.

Immutable record of a confirmed sender payment for a parcel.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from zapshift.app.db.session import Base


class Payment(Base):
    """
    Payment model.

    One payment per parcel; the transaction id comes from the payment
    processor confirmation.
    """
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    parcel_id = Column(Integer, ForeignKey('parcels.id', ondelete="SET NULL"), unique=True, nullable=True, index=True)
    user_email = Column(String(255), nullable=False, index=True)

    amount = Column(Integer, nullable=False)  # smallest currency unit
    currency = Column(String(10), nullable=False, default="usd")
    payment_method = Column(String(30), nullable=False, default="card")
    transaction_id = Column(String(255), unique=True, nullable=False)

    paid_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<Payment(id={self.id}, parcel_id={self.parcel_id}, amount={self.amount} {self.currency})>"
