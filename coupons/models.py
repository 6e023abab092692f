from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

CODE_MIN_LENGTH = 3
CODE_MAX_LENGTH = 20


def normalize_code(code) -> str:
    return (code or "").strip().upper()


class CouponQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Coupon(models.Model):
    """Percentage discount code.

    ``used_count`` only ever moves through ``coupons.services.redeem_coupon``,
    which increments it atomically in the database. Empty ``applicable_locations``
    or ``applicable_services`` means the coupon is not restricted on that axis.
    """

    code = models.CharField(max_length=CODE_MAX_LENGTH, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    discount_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    usage_limit = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    used_count = models.PositiveIntegerField(default=0)
    expiry_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    applicable_locations = models.ManyToManyField("services.Location", blank=True, related_name="coupons")
    applicable_services = models.ManyToManyField("services.Service", blank=True, related_name="coupons")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CouponQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(discount_percentage__gte=0) & Q(discount_percentage__lte=100),
                name="coupon_discount_percentage_range",
            ),
            models.CheckConstraint(condition=Q(usage_limit__gte=1), name="coupon_usage_limit_positive"),
            models.CheckConstraint(condition=Q(used_count__lte=F("usage_limit")), name="coupon_used_within_limit"),
        ]

    def __str__(self):
        return f"{self.code} ({self.discount_percentage}% off)"

    def save(self, *args, **kwargs):
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)

    def clean(self):
        super().clean()
        self.code = normalize_code(self.code)
        errors = {}
        if not CODE_MIN_LENGTH <= len(self.code) <= CODE_MAX_LENGTH:
            errors["code"] = f"Coupon code must be between {CODE_MIN_LENGTH} and {CODE_MAX_LENGTH} characters"
        if self.discount_percentage is not None and not Decimal(0) <= self.discount_percentage <= Decimal(100):
            errors["discount_percentage"] = "Discount percentage must be between 0 and 100"
        if self.usage_limit is not None and self.usage_limit < 1:
            errors["usage_limit"] = "Usage limit must be at least 1"
        if errors:
            raise ValidationError(errors)

    def is_expired_at(self, now: Optional[datetime] = None) -> bool:
        return (now or timezone.now()) > self.expiry_date

    def is_valid_at(self, now: Optional[datetime] = None) -> bool:
        return self.is_active and not self.is_expired_at(now) and self.used_count < self.usage_limit

    @property
    def is_expired(self) -> bool:
        return self.is_expired_at()

    @property
    def is_valid(self) -> bool:
        return self.is_valid_at()

    @property
    def remaining_uses(self) -> int:
        return max(0, self.usage_limit - self.used_count)

    @property
    def applicable_location_ids(self) -> List[int]:
        if not self.pk:
            return []
        return [location.pk for location in self.applicable_locations.all()]

    @property
    def applicable_service_ids(self) -> List[int]:
        if not self.pk:
            return []
        return [service.pk for service in self.applicable_services.all()]


class CouponRedemption(models.Model):
    """Ledger entry: one per booking, so a booking can never redeem twice."""

    coupon = models.ForeignKey(Coupon, on_delete=models.PROTECT, related_name="redemptions")
    booking = models.OneToOneField("bookings.Booking", on_delete=models.PROTECT, related_name="coupon_redemption")
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    redeemed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-redeemed_at", "-id"]

    def __str__(self):
        return f"{self.coupon.code} -> booking {self.booking_id}"
