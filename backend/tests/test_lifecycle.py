import pytest

from spoedpakketjes.lifecycle import InvalidTransition, check_transition
from spoedpakketjes.schemas import DeliveryStatus as S


@pytest.mark.parametrize("current,requested", [
    (S.pending, S.assigned),
    (S.assigned, S.picked_up),
    (S.picked_up, S.in_transit),
    (S.in_transit, S.delivered),
    (S.assigned, S.in_transit),
    (S.pending, S.cancelled),
    (S.in_transit, S.cancelled),
    (S.assigned, S.assigned),
])
def test_forward_moves_are_allowed(current, requested):
    check_transition(current, requested, has_driver=True)


@pytest.mark.parametrize("current,requested", [
    (S.delivered, S.pending),
    (S.in_transit, S.assigned),
    (S.picked_up, S.pending),
    (S.cancelled, S.assigned),
    (S.delivered, S.cancelled),
])
def test_backward_or_closed_moves_are_rejected(current, requested):
    with pytest.raises(InvalidTransition):
        check_transition(current, requested, has_driver=True)


def test_assignment_needs_a_driver():
    with pytest.raises(InvalidTransition) as e:
        check_transition(S.pending, S.assigned, has_driver=False)
    assert "no driver" in str(e.value)


def test_cancel_without_driver_is_fine():
    check_transition(S.pending, S.cancelled, has_driver=False)


def test_accepts_plain_strings():
    check_transition("pending", "assigned", has_driver=True)
