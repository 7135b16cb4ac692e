from checkout.domain.models import (
    Coupon,
    CouponTerms,
    CouponValidationOutcome,
    Discount,
    DiscountType,
    FixedDiscount,
    PercentageDiscount,
    PricingResult,
    RejectionReason,
    SubjectSelection,
)
from checkout.domain.value_objects import CouponCode, CouponId, Money

__all__ = [
    "Coupon",
    "CouponTerms",
    "CouponValidationOutcome",
    "Discount",
    "DiscountType",
    "FixedDiscount",
    "PercentageDiscount",
    "PricingResult",
    "RejectionReason",
    "SubjectSelection",
    "CouponCode",
    "CouponId",
    "Money",
]
