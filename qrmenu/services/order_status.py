"""Order status transition helpers."""

from __future__ import annotations

from datetime import datetime

from qrmenu.models.order import Order

ORDER_STATUSES: list[str] = ["received", "preparing", "ready", "served", "paid"]
INITIAL_STATUS: str = ORDER_STATUSES[0]

STATUS_LABELS: dict[str, str] = {
    "received": "Received",
    "preparing": "Preparing",
    "ready": "Ready",
    "served": "Served",
    "paid": "Paid",
}

ACTION_LABELS: dict[str, str] = {
    "preparing": "Start preparing",
    "ready": "Mark ready",
    "served": "Mark served",
    "paid": "Mark paid",
}


class StatusTransitionError(Exception):
    """Raised when an order cannot be advanced from the status the caller saw."""


def next_status(current: str) -> str | None:
    """Return the single successor of current, or None once paid."""
    try:
        position = ORDER_STATUSES.index(current)
    except ValueError:
        return None
    if position + 1 >= len(ORDER_STATUSES):
        return None
    return ORDER_STATUSES[position + 1]


def available_action(current: str) -> tuple[str, str] | None:
    """Return (target status, label) of the only action offered for current."""
    target = next_status(current)
    if target is None:
        return None
    return target, ACTION_LABELS[target]


def can_transition(current: str, new: str) -> bool:
    """Return whether order can move from current to new status."""
    return next_status(current) == new


def set_status(order: Order, new_status: str, now: datetime) -> None:
    order.status = new_status
    order.status_updated_at = now


def advance(order: Order, expected_current: str, now: datetime) -> str:
    """Move order one step forward and return the new status."""
    if order.status != expected_current:
        raise StatusTransitionError(
            f"Order {order.id} is {order.status}, not {expected_current}",
        )
    target = next_status(order.status)
    if target is None:
        raise StatusTransitionError(f"Order {order.id} is already {order.status}")
    set_status(order, target, now)
    return target
