"""Fulfillment state machine for orders.

    pending -> processing -> shipped -> delivered
    (any non-terminal state) -> cancelled

Forward moves may skip states, nothing moves backward, and ``delivered`` /
``cancelled`` are terminal. Payment is tracked separately (``is_paid``) and is
not part of this machine.
"""
from datetime import datetime
from typing import Optional

from storefront.db.models import Order, OrderStatus
from storefront.errors import InvalidStatusTransitionError

FULFILLMENT_CHAIN = [
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

TERMINAL = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL


def allowed_next(current: OrderStatus) -> set:
    if is_terminal(current):
        return set()
    later = FULFILLMENT_CHAIN[FULFILLMENT_CHAIN.index(current) + 1:]
    return set(later) | {OrderStatus.CANCELLED}


def check_transition(current: OrderStatus, new: OrderStatus) -> None:
    """Raise InvalidStatusTransitionError unless ``current -> new`` is allowed.

    Re-asserting a non-terminal status is accepted (it only updates the
    tracking number).
    """
    current, new = OrderStatus(current), OrderStatus(new)
    if is_terminal(current):
        raise InvalidStatusTransitionError(current.value, new.value,
                                           f"Order is already {current.value}")
    if new == current:
        return
    if new not in allowed_next(current):
        raise InvalidStatusTransitionError(current.value, new.value)


def apply_transition(order: Order, new: OrderStatus, tracking_number: Optional[str] = None) -> Order:
    check_transition(order.status, new)
    new = OrderStatus(new)
    order.status = new
    if tracking_number:
        order.tracking_number = tracking_number.strip()
    if new == OrderStatus.DELIVERED:
        order.is_delivered = True
        order.delivered_at = datetime.utcnow()
    return order
