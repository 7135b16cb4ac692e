"""Checkout service - prices a registration's subject selections."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from checkout.domain import CouponValidationOutcome, PricingResult, SubjectSelection
from checkout.domain.pricing import build_selections, price_selections
from checkout.services.coupon_service import CouponService


@dataclass(frozen=True)
class Quote:
    """Priced selections plus the outcome of the coupon, if one was entered."""

    selections: dict[str, SubjectSelection]
    pricing: PricingResult
    coupon: CouponValidationOutcome | None = None


class CheckoutService:
    """Service for computing what a candidate has to pay."""

    def __init__(self, coupons: CouponService) -> None:
        self._coupons = coupons

    def quote(
        self,
        grades: Mapping[str, str],
        coupon_code: str | None = None,
        now: datetime | None = None,
    ) -> Quote:
        """Price ``{subject: grade}`` and apply ``coupon_code`` when it is valid.

        A rejected coupon leaves the price undiscounted; the rejection is
        returned alongside so the caller can explain it. Only a missing or
        empty code means "no coupon"; a whitespace-only code is rejected as
        invalid input.

        Raises:
            UnknownGradeError: If a grade is not in the price table.
            InvalidSelectionError: If a subject name is blank.
        """
        selections = build_selections(grades)
        if not coupon_code:
            return Quote(selections=selections, pricing=price_selections(selections))

        outcome = self._coupons.validate_code(coupon_code, now)
        pricing = price_selections(selections, outcome.discount if outcome.is_valid else None)
        return Quote(selections=selections, pricing=pricing, coupon=outcome)
