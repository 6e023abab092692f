"""
Booking state machines.

Fulfillment status and payment status are independent. Each has an explicit
table of the states reachable from the current one.
"""

import logging

from shared.exceptions import StateTransitionError, ValidationError

from .models import Booking

logger = logging.getLogger(__name__)

Status = Booking.Status
PaymentStatus = Booking.PaymentStatus

STATUS_TRANSITIONS = {
    Status.PENDING: {Status.CONFIRMED, Status.CANCELLED},
    Status.CONFIRMED: {Status.PREPARING, Status.CANCELLED},
    Status.PREPARING: {Status.READY, Status.CANCELLED},
    Status.READY: {Status.COMPLETED, Status.CANCELLED},
    Status.COMPLETED: set(),
    Status.CANCELLED: set(),
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.DEPOSIT_PAID, PaymentStatus.FULLY_PAID},
    PaymentStatus.DEPOSIT_PAID: {PaymentStatus.FULLY_PAID},
    PaymentStatus.FULLY_PAID: set(),
}

TERMINAL_STATUSES = frozenset(state for state, allowed in STATUS_TRANSITIONS.items() if not allowed)


def _coerce(value, choices, field):
    try:
        return choices(value)
    except ValueError:
        allowed = ", ".join(choices.values)
        raise ValidationError([f"'{value}' is not a valid {field}; expected one of: {allowed}"])


def check_status_transition(current, requested) -> str:
    """Return the validated target status or raise.

    Unknown values raise ``ValidationError``; a move the table does not allow
    (backwards, skipping a step, leaving a terminal state, or staying put)
    raises ``StateTransitionError``.
    """
    current = _coerce(current, Status, "status")
    requested = _coerce(requested, Status, "status")
    if requested not in STATUS_TRANSITIONS[current]:
        logger.warning(f"Rejected status transition {current.value} -> {requested.value}")
        raise StateTransitionError("status", current.value, requested.value)
    return requested


def check_payment_transition(current, requested) -> str:
    """Return the validated target payment status or raise.

    Re-submitting the current payment status is allowed so a deposit amount can
    be corrected. Moving backwards is an operator error: it is logged and
    rejected, never written.
    """
    current = _coerce(current, PaymentStatus, "payment status")
    requested = _coerce(requested, PaymentStatus, "payment status")
    if requested == current:
        return requested
    if requested not in PAYMENT_TRANSITIONS[current]:
        logger.warning(f"Payment status regression requested: {current.value} -> {requested.value}")
        raise StateTransitionError("payment status", current.value, requested.value)
    return requested
