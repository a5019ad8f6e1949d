"""
Parcel status enumerations.
"""

import enum


class DeliveryStatus(str, enum.Enum):
    """
    Parcel delivery lifecycle.

    Status flow:
        NOT_COLLECTED → RIDER_ASSIGNED → IN_TRANSIT → DELIVERED → SERVICE_CENTER_DELIVERED
        SERVICE_CENTER_DELIVERED may also end an active delivery directly.
    """
    NOT_COLLECTED = "not-collected"  # Booked, waiting for a rider
    RIDER_ASSIGNED = "rider-assigned"  # Rider reserved by admin
    IN_TRANSIT = "in-transit"  # Picked up by rider
    DELIVERED = "delivered"  # Handed to receiver
    SERVICE_CENTER_DELIVERED = "service-center-delivered"  # Dropped at service center


class PaymentStatus(str, enum.Enum):
    """Sender payment state."""
    UNPAID = "unpaid"
    PAID = "paid"


class CashOutStatus(str, enum.Enum):
    """Rider payout state for a delivered parcel."""
    UNPAID = "unpaid"
    PAID = "paid"


class ParcelType(str, enum.Enum):
    """Parcel content type."""
    DOCUMENT = "document"
    NON_DOCUMENT = "non-document"
