from datetime import datetime
from typing import Optional

from shared.money import ZERO, percent_of, round_money
from shared.pydantic_models import CouponResult


def evaluate(coupon, order_total, location_id=None, service_id=None, now: Optional[datetime] = None) -> CouponResult:
    """Work out what ``coupon`` takes off ``order_total`` for the given location/service.

    Never mutates the coupon; an inapplicable coupon yields ``applicable=False``
    with the reason and an unchanged total.
    """
    order_total = round_money(order_total)
    reason = None
    if not coupon.is_active:
        reason = "Coupon is not active"
    elif coupon.is_expired_at(now):
        reason = "Coupon has expired"
    elif coupon.used_count >= coupon.usage_limit:
        reason = "Coupon usage limit has been reached"
    else:
        locations = coupon.applicable_location_ids
        services = coupon.applicable_service_ids
        if locations and location_id not in locations:
            reason = "Coupon is not valid for this location"
        elif services and service_id not in services:
            reason = "Coupon is not valid for this service"

    if reason:
        return CouponResult(
            code=coupon.code,
            applicable=False,
            original_total=order_total,
            new_total=order_total,
            reason=reason,
        )

    discount = percent_of(order_total, coupon.discount_percentage)
    return CouponResult(
        code=coupon.code,
        applicable=True,
        discount=discount,
        original_total=order_total,
        new_total=max(ZERO, order_total - discount),
    )
