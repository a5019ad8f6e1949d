"""
Payment Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class PaymentCreate(BaseModel):
    """Schema for recording a confirmed payment."""
    parcel_id: int
    amount: int = Field(..., gt=0, description="Amount in the currency's smallest unit")
    transaction_id: str = Field(..., min_length=1, max_length=255)
    payment_method: str = Field(default="card", max_length=30)


class PaymentIntentRequest(BaseModel):
    amount_in_cents: int = Field(..., gt=0)


class PaymentIntentResponse(BaseModel):
    client_secret: str


class PaymentResponse(BaseModel):
    id: int
    parcel_id: Optional[int]
    user_email: str
    amount: int
    currency: str
    payment_method: str
    transaction_id: str
    paid_at: datetime

    class Config:
        from_attributes = True


class PaymentListResponse(BaseModel):
    payments: List[PaymentResponse]
    total: int
