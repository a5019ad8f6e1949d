"""
User Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from zapshift.app.models.enums import UserRole


class UserUpsert(BaseModel):
    """Schema for registering / refreshing the calling user."""
    name: Optional[str] = Field(None, max_length=100)


class RoleUpdateRequest(BaseModel):
    role: UserRole


class UserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str]
    role: UserRole
    created_at: datetime
    last_login_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserUpsertResponse(BaseModel):
    user: UserResponse
    created: bool


class RoleResponse(BaseModel):
    email: str
    role: Optional[UserRole]


class DevTokenRequest(BaseModel):
    """Debug-only token request."""
    email: EmailStr
