import logging
import random

from django.conf import settings
from django.utils import timezone

from shared.exceptions import ReferenceExhausted

from .models import Booking

logger = logging.getLogger(__name__)

PACKAGE_PREFIX = "BK"
CUSTOM_ORDER_PREFIX = "CU"


def _reference_exists(reference):
    # Soft-deleted bookings still own their reference
    return Booking.objects.filter(reference=reference).exists()


class BookingReferenceGenerator:
    """Human readable booking references: ``{BK|CU}{YYMMDD}{NNN}``.

    ``generate`` draws a fresh random suffix on every collision, up to
    ``CATERING_REFERENCE_ATTEMPTS`` times, then raises ``ReferenceExhausted``.
    Pass ``accept`` to claim the reference under the storage layer's unique
    constraint: it receives the candidate and returns False when someone else
    took it between the check and the write.
    """

    def __init__(self, exists=None, attempts=None, rng=None):
        self.exists = exists or _reference_exists
        self.attempts = attempts or getattr(settings, "CATERING_REFERENCE_ATTEMPTS", 10)
        self.rng = rng or random.SystemRandom()
        self._issued = set()

    def candidate(self, is_custom_order, today=None) -> str:
        today = today or timezone.localdate()
        prefix = CUSTOM_ORDER_PREFIX if is_custom_order else PACKAGE_PREFIX
        return f"{prefix}{today:%y%m%d}{self.rng.randint(0, 999):03d}"

    def generate(self, is_custom_order, accept=None, today=None) -> str:
        for attempt in range(1, self.attempts + 1):
            reference = self.candidate(is_custom_order, today=today)
            if reference in self._issued or self.exists(reference):
                logger.debug(f"Booking reference collision on {reference} (attempt {attempt})")
                continue
            if accept is not None and not accept(reference):
                logger.debug(f"Booking reference {reference} was claimed concurrently (attempt {attempt})")
                continue
            self._issued.add(reference)
            return reference

        logger.error(f"Could not generate a unique booking reference after {self.attempts} attempts")
        raise ReferenceExhausted(f"No unique booking reference after {self.attempts} attempts")
