"""
Rider-related enumerations.
"""

import enum


class RiderStatus(str, enum.Enum):
    """Rider application status, set by admin review."""
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class WorkStatus(str, enum.Enum):
    """Rider availability for assignment."""
    IDLE = "idle"
    IN_DELIVERY = "in-delivery"
