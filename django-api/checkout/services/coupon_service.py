"""Coupon service - validation, administration and redemption.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import secrets
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.utils import timezone

from checkout.domain import (
    Coupon,
    CouponCode,
    CouponId,
    CouponTerms,
    CouponValidationOutcome,
    DiscountType,
    RejectionReason,
)
from checkout.domain.errors import (
    CouponNotFoundError,
    DuplicateCouponCodeError,
    InvalidCouponCodeError,
    InvalidCouponIdError,
    InvalidCouponTermsError,
    RedemptionRejectedError,
)
from checkout.domain.models import REJECTION_MESSAGES
from checkout.domain.validation import validate_coupon
from checkout.stores.interfaces import CouponStore

logger = logging.getLogger(__name__)

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

EDITABLE_FIELDS = frozenset(
    {
        "code",
        "discount_type",
        "discount_value",
        "max_uses",
        "valid_from",
        "valid_until",
        "is_active",
    }
)


def _parse_code(code: str) -> CouponCode:
    try:
        return CouponCode(code)
    except ValueError as exc:
        raise InvalidCouponCodeError(str(exc)) from exc


def _parse_id(coupon_id: str) -> CouponId:
    try:
        return CouponId.from_string(coupon_id)
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidCouponIdError() from exc


def _parse_discount_type(value: DiscountType | str) -> DiscountType:
    if isinstance(value, DiscountType):
        return value
    try:
        return DiscountType(value)
    except ValueError as exc:
        raise InvalidCouponTermsError("Discount type must be 'percentage' or 'fixed'") from exc


def _parse_discount_value(value) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidCouponTermsError("Discount value must be a number") from exc
    if not amount.is_finite():
        raise InvalidCouponTermsError("Discount value must be a number")
    return amount


def _default_validity_days() -> int:
    return getattr(settings, "COUPON_DEFAULT_VALIDITY_DAYS", 30)


def check_terms(terms: CouponTerms) -> None:
    """Reject coupon terms the pricing engine would have to clamp.

    Raises:
        InvalidCouponTermsError: If the discount, cap or window is out of range.
    """
    if terms.discount_value < 0:
        raise InvalidCouponTermsError("Discount value cannot be negative")
    if terms.discount_type is DiscountType.PERCENTAGE and terms.discount_value > 100:
        raise InvalidCouponTermsError("Percentage discount must be between 0 and 100")
    if terms.max_uses < 0:
        raise InvalidCouponTermsError("Maximum uses cannot be negative")
    if terms.valid_from > terms.valid_until:
        raise InvalidCouponTermsError("Coupon cannot end before it starts")


class CouponService:
    """Service for coupon validation, administration and redemption."""

    def __init__(self, store: CouponStore, clock: Callable[[], datetime] = timezone.now) -> None:
        self._store = store
        self._clock = clock

    def validate_code(self, code: str, now: datetime | None = None) -> CouponValidationOutcome:
        """Check whether ``code`` can be applied at ``now`` (default: the clock)."""
        return validate_coupon(code, now or self._clock(), self._store)

    def list_coupons(self) -> list[Coupon]:
        return self._store.list_coupons()

    def get_coupon(self, coupon_id: str) -> Coupon:
        """Return a coupon by ID.

        Raises:
            InvalidCouponIdError: If the coupon_id is not a valid UUID.
            CouponNotFoundError: If the coupon does not exist.
        """
        coupon = self._store.get_coupon(_parse_id(coupon_id))
        if coupon is None:
            raise CouponNotFoundError(coupon_id)
        return coupon

    def create_coupon(
        self,
        code: str,
        discount_type: DiscountType | str,
        discount_value,
        max_uses: int | None = 0,
        valid_from: datetime | None = None,
        valid_until: datetime | None = None,
        is_active: bool = True,
        created_by: str | None = None,
    ) -> Coupon:
        """Create a coupon.

        Missing window bounds default to now and now plus
        ``COUPON_DEFAULT_VALIDITY_DAYS``. A missing cap means unlimited.

        Raises:
            InvalidCouponCodeError: If the code is blank or too long.
            InvalidCouponTermsError: If the terms are out of range.
            DuplicateCouponCodeError: If the code is already in use.
        """
        coupon_code = _parse_code(code)
        now = self._clock()
        start = valid_from or now
        terms = CouponTerms(
            code=coupon_code.value,
            discount_type=_parse_discount_type(discount_type),
            discount_value=_parse_discount_value(discount_value),
            max_uses=max_uses or 0,
            valid_from=start,
            valid_until=valid_until or start + timedelta(days=_default_validity_days()),
            is_active=is_active,
        )
        check_terms(terms)
        if self._store.code_exists(coupon_code):
            raise DuplicateCouponCodeError(coupon_code.value)

        coupon = self._store.create_coupon(terms, created_by)
        logger.info("Coupon %s created by %s", coupon.code, created_by or "unknown")
        return coupon

    def update_coupon(self, coupon_id: str, **changes) -> Coupon:
        """Apply a partial update to a coupon's terms.

        Raises:
            InvalidCouponIdError: If the coupon_id is not a valid UUID.
            CouponNotFoundError: If the coupon does not exist.
            InvalidCouponCodeError: If a new code is blank or too long.
            InvalidCouponTermsError: If the merged terms are out of range
                or the cap is below the uses already recorded.
            DuplicateCouponCodeError: If a new code is already in use.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidCouponTermsError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        coupon = self.get_coupon(coupon_id)
        updates = {}
        if "code" in changes:
            updates["code"] = _parse_code(changes["code"]).value
        if "discount_type" in changes:
            updates["discount_type"] = _parse_discount_type(changes["discount_type"])
        if "discount_value" in changes:
            updates["discount_value"] = _parse_discount_value(changes["discount_value"])
        if "max_uses" in changes:
            updates["max_uses"] = changes["max_uses"] or 0
        for field in ("valid_from", "valid_until", "is_active"):
            if field in changes and changes[field] is not None:
                updates[field] = changes[field]

        terms = replace(CouponTerms.of(coupon), **updates)
        check_terms(terms)
        terms.check_cap_covers_usage(coupon.used_count)
        if terms.code != coupon.code and self._store.code_exists(CouponCode(terms.code)):
            raise DuplicateCouponCodeError(terms.code)

        updated = self._store.update_coupon(coupon.id, terms)
        if updated is None:
            raise CouponNotFoundError(coupon_id)
        logger.info("Coupon %s updated (%s)", updated.code, ", ".join(sorted(updates)) or "no changes")
        return updated

    def delete_coupon(self, coupon_id: str) -> None:
        """Delete a coupon.

        Raises:
            InvalidCouponIdError: If the coupon_id is not a valid UUID.
            CouponNotFoundError: If the coupon does not exist.
        """
        if not self._store.delete_coupon(_parse_id(coupon_id)):
            raise CouponNotFoundError(coupon_id)
        logger.info("Coupon %s deleted", coupon_id)

    def generate_code(self, length: int = 8) -> str:
        """Return a random code that no coupon uses yet."""
        while True:
            candidate = "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
            if not self._store.code_exists(CouponCode(candidate)):
                return candidate

    def redeem(
        self, code: str, payment_reference: str, amount: int, now: datetime | None = None
    ) -> Coupon:
        """Consume one use of a coupon once its payment is confirmed.

        The store re-checks the cap atomically; the earlier validation only
        supplies a specific rejection reason.

        Raises:
            RedemptionRejectedError: If the coupon cannot be used now.
            DuplicateRedemptionError: If the payment was already recorded.
        """
        moment = now or self._clock()
        outcome = self.validate_code(code, moment)
        if not outcome.is_valid:
            logger.warning("Redemption of coupon %r rejected: %s", code, outcome.reason.value)
            raise RedemptionRejectedError(outcome.reason, outcome.message)

        coupon = self._store.record_redemption(CouponCode(code), payment_reference, amount, moment)
        if coupon is None:
            reason = RejectionReason.USAGE_CAP_REACHED
            logger.warning("Redemption of coupon %r lost the race for its last use", code)
            raise RedemptionRejectedError(reason, REJECTION_MESSAGES[reason])
        return coupon
