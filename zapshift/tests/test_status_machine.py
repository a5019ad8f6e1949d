"""
Delivery lifecycle transition table.
"""

import pytest
from zapshift.app.domain.dispatch.status_machine import (
    TRANSITIONS, can_request, completes_delivery, is_valid_transition
)
from zapshift.app.models.parcel_enums import DeliveryStatus as S


@pytest.mark.parametrize("current,requested", [
    (S.RIDER_ASSIGNED, S.IN_TRANSIT),
    (S.RIDER_ASSIGNED, S.DELIVERED),
    (S.IN_TRANSIT, S.IN_TRANSIT),
    (S.IN_TRANSIT, S.DELIVERED),
    (S.IN_TRANSIT, S.SERVICE_CENTER_DELIVERED),
    (S.DELIVERED, S.SERVICE_CENTER_DELIVERED),
])
def test_allowed_transitions(current, requested):
    allowed, _ = can_request(current, requested)
    assert allowed


@pytest.mark.parametrize("current,requested", [
    (S.NOT_COLLECTED, S.IN_TRANSIT),
    (S.NOT_COLLECTED, S.DELIVERED),
    (S.DELIVERED, S.IN_TRANSIT),
    (S.DELIVERED, S.NOT_COLLECTED),
    (S.SERVICE_CENTER_DELIVERED, S.DELIVERED),
    (S.IN_TRANSIT, S.NOT_COLLECTED),
])
def test_refused_transitions(current, requested):
    allowed, reason = can_request(current, requested)
    assert not allowed
    assert reason


def test_rider_assigned_is_never_requested_directly():
    assert is_valid_transition(S.NOT_COLLECTED, S.RIDER_ASSIGNED)
    allowed, reason = can_request(S.NOT_COLLECTED, S.RIDER_ASSIGNED)
    assert not allowed
    assert "assign-rider" in reason


def test_final_status_has_no_successor():
    assert TRANSITIONS[S.SERVICE_CENTER_DELIVERED] == frozenset()
    allowed, reason = can_request(S.SERVICE_CENTER_DELIVERED, S.IN_TRANSIT)
    assert not allowed
    assert "final" in reason


def test_completes_delivery_only_from_active_states():
    assert completes_delivery(S.IN_TRANSIT, S.DELIVERED)
    assert completes_delivery(S.RIDER_ASSIGNED, S.SERVICE_CENTER_DELIVERED)
    assert not completes_delivery(S.DELIVERED, S.SERVICE_CENTER_DELIVERED)
    assert not completes_delivery(S.RIDER_ASSIGNED, S.IN_TRANSIT)
