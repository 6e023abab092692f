import logging

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from shared.exceptions import ConflictError, NotFoundError
from shared.pydantic_models import CouponResult

from .evaluator import evaluate
from .models import Coupon, CouponRedemption, normalize_code

logger = logging.getLogger(__name__)


def get_coupon(code) -> Coupon:
    try:
        return Coupon.objects.prefetch_related("applicable_locations", "applicable_services").get(
            code=normalize_code(code)
        )
    except Coupon.DoesNotExist:
        raise NotFoundError(f"Coupon '{normalize_code(code)}' does not exist")


def evaluate_coupon(code, order_total, location_id=None, service_id=None, now=None) -> CouponResult:
    return evaluate(get_coupon(code), order_total, location_id, service_id, now=now)


def redeem_coupon(coupon: Coupon, booking, discount_amount=None, now=None) -> CouponRedemption:
    """Consume one use of ``coupon`` for ``booking``.

    The increment is a single conditional UPDATE so two bookings can never both
    take the last use; the loser gets ``ConflictError``. Redeeming again for the
    same booking returns the existing ledger entry without touching the count.
    """
    now = now or timezone.now()
    existing = CouponRedemption.objects.filter(booking=booking).select_related("coupon").first()
    if existing is not None:
        if existing.coupon_id != coupon.pk:
            raise ConflictError(f"Booking {booking.reference} already redeemed coupon {existing.coupon.code}")
        return existing

    try:
        with transaction.atomic():
            updated = Coupon.objects.filter(
                pk=coupon.pk,
                is_active=True,
                expiry_date__gte=now,
                used_count__lt=F("usage_limit"),
            ).update(used_count=F("used_count") + 1)
            if not updated:
                logger.warning(f"Coupon {coupon.code} could not be redeemed for booking {booking.reference}")
                raise ConflictError(f"Coupon {coupon.code} is no longer available")
            redemption = CouponRedemption.objects.create(
                coupon=coupon,
                booking=booking,
                discount_amount=discount_amount if discount_amount is not None else booking.discount_amount,
                redeemed_at=now,
            )
    except IntegrityError:
        # A concurrent request recorded this booking first; its increment stands, ours rolled back
        return CouponRedemption.objects.get(booking=booking)

    coupon.refresh_from_db(fields=["used_count"])
    logger.info(f"Coupon {coupon.code} redeemed for booking {booking.reference} ({coupon.remaining_uses} uses left)")
    return redemption
