"""
Delivery lifecycle state machine.

Encodes which delivery status may follow which. NOT_COLLECTED → RIDER_ASSIGNED
is reserved for the assignment workflow and never requested directly.
"""

from zapshift.app.models.parcel_enums import DeliveryStatus


# Current status -> statuses a caller may request next
TRANSITIONS: dict[DeliveryStatus, frozenset[DeliveryStatus]] = {
    DeliveryStatus.NOT_COLLECTED: frozenset({DeliveryStatus.RIDER_ASSIGNED}),
    DeliveryStatus.RIDER_ASSIGNED: frozenset({
        DeliveryStatus.IN_TRANSIT,
        DeliveryStatus.DELIVERED,
        DeliveryStatus.SERVICE_CENTER_DELIVERED,
    }),
    DeliveryStatus.IN_TRANSIT: frozenset({
        DeliveryStatus.IN_TRANSIT,  # repeated pickup scan keeps the first picked_up_at
        DeliveryStatus.DELIVERED,
        DeliveryStatus.SERVICE_CENTER_DELIVERED,
    }),
    DeliveryStatus.DELIVERED: frozenset({DeliveryStatus.SERVICE_CENTER_DELIVERED}),
    DeliveryStatus.SERVICE_CENTER_DELIVERED: frozenset(),
}

# Reachable only through RiderAssignmentService
ASSIGNMENT_ONLY = frozenset({DeliveryStatus.RIDER_ASSIGNED})

# Statuses in which a rider is attached to the parcel
RIDER_ATTACHED = frozenset({
    DeliveryStatus.RIDER_ASSIGNED,
    DeliveryStatus.IN_TRANSIT,
    DeliveryStatus.DELIVERED,
    DeliveryStatus.SERVICE_CENTER_DELIVERED,
})

# Statuses in which the rider is still carrying the parcel
ACTIVE_DELIVERY = frozenset({DeliveryStatus.RIDER_ASSIGNED, DeliveryStatus.IN_TRANSIT})

COMPLETED = frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.SERVICE_CENTER_DELIVERED})


def is_valid_transition(current: DeliveryStatus, requested: DeliveryStatus) -> bool:
    """True if `requested` may follow `current` in the table."""
    return requested in TRANSITIONS.get(current, frozenset())


def can_request(current: DeliveryStatus, requested: DeliveryStatus) -> tuple[bool, str]:
    """
    Check a caller-requested transition.

    Returns:
        (allowed, reason) where reason explains a refusal
    """
    if requested in ASSIGNMENT_ONLY:
        return False, "rider assignment is done through the assign-rider operation"
    if not is_valid_transition(current, requested):
        if not TRANSITIONS.get(current):
            return False, f"'{current.value}' is a final status"
        return False, "transition is not allowed"
    return True, "ok"


def completes_delivery(current: DeliveryStatus, requested: DeliveryStatus) -> bool:
    """True if the transition ends an active delivery and frees the rider."""
    return current in ACTIVE_DELIVERY and requested in COMPLETED
