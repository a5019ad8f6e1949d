"""
Tracking Pydantic schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class TrackingEventCreate(BaseModel):
    """Schema for a manual tracking entry."""
    tracking_id: str = Field(..., min_length=1, max_length=32)
    status: str = Field(..., min_length=1, max_length=50)
    location: Optional[str] = Field(None, max_length=200)
    message: Optional[str] = Field(None, max_length=500)


class TrackingEventResponse(BaseModel):
    id: int
    parcel_id: Optional[int]
    tracking_id: str
    status: str
    location: Optional[str]
    message: Optional[str]
    updated_by: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True


class TrackingHistoryResponse(BaseModel):
    tracking_id: str
    events: List[TrackingEventResponse]
