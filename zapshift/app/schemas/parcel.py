"""
Parcel Pydantic schemas.

Defines request and response models for parcel booking and the delivery lifecycle.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Dict
from zapshift.app.models.parcel_enums import DeliveryStatus, PaymentStatus, CashOutStatus, ParcelType


class ParcelCreate(BaseModel):
    """Schema for booking a new parcel."""
    title: str = Field(..., min_length=1, max_length=200, description="Parcel name")
    parcel_type: ParcelType = Field(default=ParcelType.NON_DOCUMENT)
    weight_kg: Optional[float] = Field(None, gt=0, description="Weight in kilograms")
    sender_name: str = Field(..., min_length=1, max_length=100)
    sender_district: str = Field(..., min_length=1, max_length=100)
    sender_address: Optional[str] = Field(None, max_length=500)
    receiver_name: str = Field(..., min_length=1, max_length=100)
    receiver_district: str = Field(..., min_length=1, max_length=100)
    receiver_address: Optional[str] = Field(None, max_length=500)
    cost: int = Field(..., gt=0, description="Declared cost in the currency's smallest unit")


class RiderAssignmentRequest(BaseModel):
    """Schema for assigning a rider to a parcel."""
    rider_id: int


class StatusUpdateRequest(BaseModel):
    """Schema for advancing a parcel's delivery status."""
    status: DeliveryStatus
    location: Optional[str] = Field(None, max_length=200)


class ParcelResponse(BaseModel):
    """Schema for parcel response."""
    id: int
    tracking_id: str
    user_email: str
    title: str
    parcel_type: ParcelType
    weight_kg: Optional[float]
    sender_name: str
    sender_district: str
    sender_address: Optional[str]
    receiver_name: str
    receiver_district: str
    receiver_address: Optional[str]
    cost: int
    delivery_status: DeliveryStatus
    payment_status: PaymentStatus
    assigned_rider_id: Optional[int] = None
    assigned_rider_name: Optional[str] = None
    assigned_rider_email: Optional[str] = None
    assigned_at: Optional[datetime] = None
    picked_up_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cash_out_status: Optional[CashOutStatus] = None
    cash_out_at: Optional[datetime] = None
    rider_earning: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ParcelListResponse(BaseModel):
    """Schema for parcel list."""
    parcels: List[ParcelResponse]
    total: int


class ParcelDeleteResponse(BaseModel):
    parcel_id: int
    deleted: bool


class StatusCountResponse(BaseModel):
    """Parcel count per delivery status."""
    counts: Dict[str, int]
    total: int
