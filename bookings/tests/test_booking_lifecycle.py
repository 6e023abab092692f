from django.test import SimpleTestCase

from bookings.lifecycle import (
    STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    check_payment_transition,
    check_status_transition,
)
from bookings.models import Booking
from shared.exceptions import StateTransitionError, ValidationError

Status = Booking.Status
PaymentStatus = Booking.PaymentStatus


class StatusTransitionTests(SimpleTestCase):
    def test_forward_path_is_accepted(self):
        path = ["pending", "confirmed", "preparing", "ready", "completed"]
        for current, requested in zip(path, path[1:]):
            self.assertEqual(check_status_transition(current, requested), requested)

    def test_completed_is_terminal(self):
        for requested in Status.values:
            with self.assertRaises(StateTransitionError):
                check_status_transition("completed", requested)

    def test_cancelled_reachable_from_every_open_state(self):
        for current in ["pending", "confirmed", "preparing", "ready"]:
            self.assertEqual(check_status_transition(current, "cancelled"), Status.CANCELLED)
        with self.assertRaises(StateTransitionError):
            check_status_transition("cancelled", "pending")

    def test_backward_and_skipping_moves_are_rejected(self):
        with self.assertRaises(StateTransitionError) as ctx:
            check_status_transition("preparing", "confirmed")
        self.assertEqual(ctx.exception.errors, ["Cannot change status from 'preparing' to 'confirmed'"])
        with self.assertRaises(StateTransitionError):
            check_status_transition("pending", "ready")
        with self.assertRaises(StateTransitionError):
            check_status_transition("pending", "pending")

    def test_unknown_status_is_a_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            check_status_transition("pending", "shipped")
        self.assertNotIsInstance(ctx.exception, StateTransitionError)

    def test_terminal_statuses(self):
        self.assertEqual(TERMINAL_STATUSES, {Status.COMPLETED, Status.CANCELLED})
        self.assertEqual(set(STATUS_TRANSITIONS), set(Status))


class PaymentTransitionTests(SimpleTestCase):
    def test_forward_moves(self):
        self.assertEqual(check_payment_transition("pending", "deposit_paid"), PaymentStatus.DEPOSIT_PAID)
        self.assertEqual(check_payment_transition("deposit_paid", "fully_paid"), PaymentStatus.FULLY_PAID)
        self.assertEqual(check_payment_transition("pending", "fully_paid"), PaymentStatus.FULLY_PAID)

    def test_same_state_is_allowed(self):
        self.assertEqual(check_payment_transition("deposit_paid", "deposit_paid"), PaymentStatus.DEPOSIT_PAID)

    def test_regression_is_logged_and_rejected(self):
        with self.assertLogs("bookings.lifecycle", level="WARNING") as logs:
            with self.assertRaises(StateTransitionError):
                check_payment_transition("fully_paid", "pending")
        self.assertIn("fully_paid -> pending", logs.output[0])

    def test_unknown_payment_status(self):
        with self.assertRaises(ValidationError):
            check_payment_transition("pending", "refunded")
