from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.test import TestCase
from django.utils import timezone

from bookings.services import create_booking
from bookings.tests.factories import (
    create_banquet,
    create_location_and_service,
    customer_details,
    delivery_details,
)
from coupons.evaluator import evaluate
from coupons.models import Coupon, CouponRedemption
from coupons.services import evaluate_coupon, redeem_coupon
from shared.exceptions import ConflictError, NotFoundError, ValidationError


def make_coupon(**overrides):
    fields = {
        "code": "feast20",
        "name": "Feast 20",
        "discount_percentage": Decimal("20"),
        "usage_limit": 5,
        "expiry_date": timezone.now() + timedelta(days=30),
    }
    fields.update(overrides)
    return Coupon.objects.create(**fields)


class CouponModelTests(TestCase):
    def test_code_is_normalized(self):
        coupon = make_coupon(code="  feast20 ")
        self.assertEqual(coupon.code, "FEAST20")

    def test_active_queryset(self):
        live = make_coupon()
        make_coupon(code="PAUSED", is_active=False)
        self.assertEqual([live], list(Coupon.objects.active()))

    def test_derived_flags(self):
        coupon = make_coupon(usage_limit=2, used_count=2)
        self.assertFalse(coupon.is_expired)
        self.assertFalse(coupon.is_valid)
        self.assertEqual(coupon.remaining_uses, 0)

        expired = make_coupon(code="OLD10", expiry_date=timezone.now() - timedelta(minutes=1))
        self.assertTrue(expired.is_expired)
        self.assertFalse(expired.is_valid)

    def test_clean_rules(self):
        coupon = Coupon(code="ab", name="Bad", discount_percentage=Decimal("120"), usage_limit=0,
                        expiry_date=timezone.now())
        with self.assertRaises(DjangoValidationError) as ctx:
            coupon.clean()
        self.assertEqual(set(ctx.exception.message_dict), {"code", "discount_percentage", "usage_limit"})


class CouponEvaluationTests(TestCase):
    def setUp(self):
        self.location, self.service = create_location_and_service()

    def test_twenty_percent_of_one_hundred(self):
        result = evaluate(make_coupon(), Decimal("100"), self.location.id, self.service.id)
        self.assertTrue(result.applicable)
        self.assertEqual(result.discount, Decimal("20.00"))
        self.assertEqual(result.new_total, Decimal("80.00"))

    def test_discount_rounds_half_up(self):
        result = evaluate(make_coupon(discount_percentage=Decimal("12.5")), Decimal("0.99"))
        self.assertEqual(result.discount, Decimal("0.12"))
        result = evaluate(make_coupon(code="HALF", discount_percentage=Decimal("50")), Decimal("0.05"))
        self.assertEqual(result.discount, Decimal("0.03"))
        self.assertEqual(result.new_total, Decimal("0.02"))

    def test_full_discount_never_goes_negative(self):
        result = evaluate(make_coupon(discount_percentage=Decimal("100")), Decimal("42.10"))
        self.assertEqual(result.new_total, Decimal("0.00"))

    def test_expired_or_exhausted_is_never_applicable(self):
        expired = make_coupon(code="OLD", expiry_date=timezone.now() - timedelta(days=1))
        exhausted = make_coupon(code="USED", usage_limit=1, used_count=1)
        for coupon in (expired, exhausted):
            coupon.applicable_locations.add(self.location)
            result = evaluate(coupon, Decimal("100"), self.location.id, self.service.id)
            self.assertFalse(result.applicable)
            self.assertEqual(result.new_total, Decimal("100.00"))

    def test_scope_restrictions(self):
        coupon = make_coupon()
        other_location, other_service = create_location_and_service(name="Pickup")
        coupon.applicable_services.add(other_service)
        result = evaluate(coupon, Decimal("100"), self.location.id, self.service.id)
        self.assertEqual(result.reason, "Coupon is not valid for this service")
        self.assertTrue(evaluate(coupon, Decimal("100"), self.location.id, other_service.id).applicable)

    def test_inactive_coupon(self):
        result = evaluate(make_coupon(is_active=False), Decimal("100"))
        self.assertEqual(result.reason, "Coupon is not active")

    def test_lookup_is_case_insensitive(self):
        make_coupon()
        self.assertTrue(evaluate_coupon(" Feast20", "100").applicable)
        with self.assertRaises(NotFoundError):
            evaluate_coupon("MISSING", "100")


class CouponRedemptionTests(TestCase):
    def setUp(self):
        _, self.service = create_location_and_service()
        self.package, self.chicken, _ = create_banquet(self.service)

    def _book(self, coupon_code=None):
        return create_booking(
            {
                "definition_id": self.package.id,
                "payload": {"categories": {"mains": {"curry": [{"item_id": self.chicken.id}]}}},
                "attendee_count": 10,
            },
            None,
            customer_details(),
            delivery_details(),
            coupon_code=coupon_code,
        )

    def test_booking_freezes_discount_and_redeems(self):
        coupon = make_coupon(usage_limit=2)
        booking = self._book("feast20")

        self.assertEqual(booking.subtotal, Decimal("300.00"))
        self.assertEqual(booking.discount_amount, Decimal("60.00"))
        self.assertEqual(booking.total, Decimal("240.00"))
        self.assertEqual(booking.coupon_code, "FEAST20")
        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)
        self.assertEqual(booking.coupon_redemption.discount_amount, Decimal("60.00"))

    def test_redeeming_twice_for_one_booking_is_idempotent(self):
        coupon = make_coupon(usage_limit=3)
        booking = self._book("FEAST20")
        again = redeem_coupon(coupon, booking)

        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)
        self.assertEqual(again.booking_id, booking.id)
        self.assertEqual(CouponRedemption.objects.count(), 1)

    def test_last_use_cannot_be_taken_twice(self):
        coupon = make_coupon(usage_limit=1)
        first = self._book()
        second = self._book()
        redeem_coupon(coupon, first)
        with self.assertRaises(ConflictError):
            redeem_coupon(coupon, second)
        coupon.refresh_from_db()
        self.assertEqual(coupon.used_count, 1)
        self.assertFalse(CouponRedemption.objects.filter(booking=second).exists())

    def test_exhausted_coupon_rejects_booking(self):
        make_coupon(usage_limit=1, used_count=1)
        with self.assertRaises(ValidationError) as ctx:
            self._book("FEAST20")
        self.assertEqual(ctx.exception.errors, ["Coupon usage limit has been reached"])
