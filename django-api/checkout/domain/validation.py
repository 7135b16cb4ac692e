"""Coupon validator.

Checks run in a fixed order and stop at the first failure, so a real but
stale code reports ``EXPIRED`` rather than a generic rejection. The
validator only reads from the repository; usage is incremented by the store
when a redemption is recorded.
"""

import logging
from datetime import datetime
from typing import Protocol

from checkout.domain.errors import CouponStoreUnavailableError
from checkout.domain.models import Coupon, CouponValidationOutcome, RejectionReason
from checkout.domain.value_objects import CouponCode

logger = logging.getLogger(__name__)


class CouponLookup(Protocol):
    def find_by_code(self, code: CouponCode) -> Coupon | None: ...


def check_coupon(coupon: Coupon, now: datetime) -> RejectionReason | None:
    """Return why ``coupon`` cannot be used at ``now``, or None if it can."""
    if not coupon.is_active:
        return RejectionReason.INACTIVE
    if now > coupon.valid_until:
        return RejectionReason.EXPIRED
    if now < coupon.valid_from:
        return RejectionReason.NOT_YET_VALID
    if not coupon.is_unlimited and coupon.used_count >= coupon.max_uses:
        return RejectionReason.USAGE_CAP_REACHED
    return None


def validate_coupon(code: str, now: datetime, repository: CouponLookup) -> CouponValidationOutcome:
    try:
        coupon_code = CouponCode(code)
    except ValueError:
        return CouponValidationOutcome.rejected(RejectionReason.INVALID_INPUT)

    try:
        coupon = repository.find_by_code(coupon_code)
    except CouponStoreUnavailableError:
        logger.warning("Coupon lookup failed for code %s", coupon_code, exc_info=True)
        return CouponValidationOutcome.rejected(RejectionReason.LOOKUP_FAILED)

    if coupon is None:
        return CouponValidationOutcome.rejected(RejectionReason.NOT_FOUND)

    reason = check_coupon(coupon, now)
    if reason is not None:
        return CouponValidationOutcome.rejected(reason)
    return CouponValidationOutcome.accepted(coupon)
