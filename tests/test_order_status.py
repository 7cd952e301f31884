"""Tests for the order fulfillment state machine."""

import pytest

from storefront.db.models import Order, OrderStatus
from storefront.errors import InvalidStatusTransitionError
from storefront.services.order_status import allowed_next, apply_transition, check_transition

P, PR, S, D, C = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
)


@pytest.mark.parametrize(
    "current,new",
    [(P, PR), (P, S), (P, D), (P, C), (PR, S), (PR, D), (PR, C), (S, D), (S, C)],
)
def test_forward_and_cancel_moves_allowed(current, new):
    check_transition(current, new)


@pytest.mark.parametrize(
    "current,new",
    [(PR, P), (S, PR), (S, P), (D, PR), (D, P), (D, C), (C, S), (C, P), (C, D)],
)
def test_backward_and_terminal_moves_rejected(current, new):
    with pytest.raises(InvalidStatusTransitionError) as exc:
        check_transition(current, new)
    assert exc.value.current == current.value
    assert exc.value.requested == new.value


@pytest.mark.parametrize("terminal", [D, C])
def test_terminal_states_refuse_reassertion(terminal):
    with pytest.raises(InvalidStatusTransitionError):
        check_transition(terminal, terminal)


def test_same_non_terminal_status_is_a_noop():
    check_transition(PR, PR)


def test_allowed_next():
    assert allowed_next(P) == {PR, S, D, C}
    assert allowed_next(S) == {D, C}
    assert allowed_next(D) == set()
    assert allowed_next(C) == set()


def test_plain_strings_accepted():
    check_transition("pending", "shipped")
    with pytest.raises(InvalidStatusTransitionError):
        check_transition("delivered", "processing")


def test_delivering_sets_flags():
    order = Order(status=S, is_delivered=False)
    apply_transition(order, D)
    assert order.status == D
    assert order.is_delivered is True
    assert order.delivered_at is not None


def test_tracking_number_recorded():
    order = Order(status=PR, is_delivered=False)
    apply_transition(order, S, tracking_number=" TRK123 ")
    assert order.status == S
    assert order.tracking_number == "TRK123"
    assert order.is_delivered is False
    assert order.delivered_at is None


def test_rejected_transition_leaves_order_untouched():
    order = Order(status=C, is_delivered=False, tracking_number=None)
    with pytest.raises(InvalidStatusTransitionError):
        apply_transition(order, S, tracking_number="TRK")
    assert order.status == C
    assert order.tracking_number is None
