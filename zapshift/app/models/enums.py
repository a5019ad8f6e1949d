"""
User roles enumeration.

Defines the role types for the parcel delivery system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Sender who books and pays for parcels (default role)
        ADMIN: Operations staff; assigns riders and reviews applications
        RIDER: Approved courier who picks up and delivers parcels
    """
    USER = "user"
    ADMIN = "admin"
    RIDER = "rider"
