"""Domain models representing persisted and derived state.

These are pure domain objects with no API input rules.
Django ORM models are in checkout/models.py (persistence layer).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from checkout.domain.errors import InvalidCouponTermsError
from checkout.domain.value_objects import CouponId


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class PercentageDiscount:
    """Discount of ``magnitude`` percent of the subtotal."""

    magnitude: Decimal


@dataclass(frozen=True)
class FixedDiscount:
    """Discount of ``magnitude`` whole currency units."""

    magnitude: Decimal


Discount = PercentageDiscount | FixedDiscount


def discount_from_terms(discount_type: DiscountType, value: Decimal) -> Discount:
    if discount_type is DiscountType.PERCENTAGE:
        return PercentageDiscount(magnitude=value)
    return FixedDiscount(magnitude=value)


@dataclass(frozen=True)
class Coupon:
    """Domain representation of a Coupon."""

    id: CouponId
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_uses: int
    used_count: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool
    created_by: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def discount(self) -> Discount:
        return discount_from_terms(self.discount_type, self.discount_value)

    @property
    def is_unlimited(self) -> bool:
        """A cap of zero means the coupon can be redeemed any number of times."""
        return self.max_uses <= 0

    @property
    def remaining_uses(self) -> int | None:
        if self.is_unlimited:
            return None
        return max(self.max_uses - self.used_count, 0)


@dataclass(frozen=True)
class CouponTerms:
    """Administrator-editable part of a coupon."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    max_uses: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool = True

    @classmethod
    def of(cls, coupon: Coupon) -> "CouponTerms":
        return cls(
            code=coupon.code,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            max_uses=coupon.max_uses,
            valid_from=coupon.valid_from,
            valid_until=coupon.valid_until,
            is_active=coupon.is_active,
        )

    def check_cap_covers_usage(self, used_count: int) -> None:
        """Reject a cap lower than the number of redemptions already recorded."""
        if self.max_uses > 0 and self.max_uses < used_count:
            raise InvalidCouponTermsError("Maximum uses cannot be below uses already recorded")


@dataclass(frozen=True)
class SubjectSelection:
    """A chosen subject's target grade and its price from the grade table."""

    grade: str
    price: int

    def __post_init__(self) -> None:
        if isinstance(self.price, bool) or not isinstance(self.price, int):
            raise ValueError("Subject price must be a whole number")
        if self.price < 0:
            raise ValueError("Subject price cannot be negative")


@dataclass(frozen=True)
class PricingResult:
    subtotal: int
    discount_amount: int
    total: int


class RejectionReason(Enum):
    """Why a coupon code was not accepted."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"
    NOT_YET_VALID = "NOT_YET_VALID"
    USAGE_CAP_REACHED = "USAGE_CAP_REACHED"
    LOOKUP_FAILED = "LOOKUP_FAILED"


REJECTION_MESSAGES = {
    RejectionReason.INVALID_INPUT: "Coupon code is required",
    RejectionReason.NOT_FOUND: "Invalid coupon code",
    RejectionReason.INACTIVE: "This coupon is no longer active",
    RejectionReason.EXPIRED: "This coupon has expired",
    RejectionReason.NOT_YET_VALID: "This coupon is not yet valid",
    RejectionReason.USAGE_CAP_REACHED: "This coupon has reached its maximum usage limit",
    RejectionReason.LOOKUP_FAILED: "Could not validate the coupon right now. Please try again.",
}


@dataclass(frozen=True)
class CouponValidationOutcome:
    """Result of checking a coupon code.

    A valid outcome has no reason and carries the discount terms; a rejected
    outcome has a reason and no discount.
    """

    reason: RejectionReason | None = None
    discount: Discount | None = None
    coupon: Coupon | None = None

    @classmethod
    def accepted(cls, coupon: Coupon) -> "CouponValidationOutcome":
        return cls(discount=coupon.discount, coupon=coupon)

    @classmethod
    def rejected(cls, reason: RejectionReason) -> "CouponValidationOutcome":
        return cls(reason=reason)

    @property
    def is_valid(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        if self.reason is None:
            return "Coupon applied"
        return REJECTION_MESSAGES[self.reason]
