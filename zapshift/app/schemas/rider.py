"""
Rider Pydantic schemas.
"""

import enum
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from zapshift.app.models.rider_enums import RiderStatus, WorkStatus


class RiderApplication(BaseModel):
    """Schema for a rider application. The email comes from the caller's token."""
    name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    region: Optional[str] = Field(None, max_length=100)
    district: str = Field(..., min_length=1, max_length=100)
    bike_registration: Optional[str] = Field(None, max_length=50)


class ReviewDecision(str, enum.Enum):
    """Admin decisions on a rider application."""
    ACTIVE = "active"
    REJECTED = "rejected"


class RiderReviewRequest(BaseModel):
    status: ReviewDecision


class RiderResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    region: Optional[str]
    district: str
    bike_registration: Optional[str]
    status: RiderStatus
    work_status: WorkStatus
    applied_at: datetime
    reviewed_at: Optional[datetime] = None
    last_assigned_at: Optional[datetime] = None
    last_delivery_completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RiderReviewResponse(BaseModel):
    rider: RiderResponse
    role_granted: bool


class RiderListResponse(BaseModel):
    riders: List[RiderResponse]
    total: int


class RiderEarningsResponse(BaseModel):
    """Earnings summary for the calling rider (smallest currency unit)."""
    rider_email: str
    cashed_out_total: int
    cashed_out_parcels: int
    pending_total: int
    pending_parcels: int
