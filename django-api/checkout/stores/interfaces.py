"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from checkout.domain import Coupon, CouponCode, CouponId, CouponTerms


class CouponStore(ABC):
    """Interface for coupon persistence operations."""

    @abstractmethod
    def find_by_code(self, code: CouponCode) -> Coupon | None:
        """Return the coupon with this exact code, or None if not found.

        Raises:
            CouponStoreUnavailableError: If the lookup itself failed.
        """
        ...

    @abstractmethod
    def list_coupons(self) -> list[Coupon]:
        """Return all coupons ordered by created_at descending."""
        ...

    @abstractmethod
    def get_coupon(self, coupon_id: CouponId) -> Coupon | None:
        """Return a coupon by ID, or None if not found."""
        ...

    @abstractmethod
    def code_exists(self, code: CouponCode) -> bool:
        """Check if a coupon code is already taken."""
        ...

    @abstractmethod
    def create_coupon(self, terms: CouponTerms, created_by: str | None) -> Coupon:
        """Persist a new coupon with zero uses."""
        ...

    @abstractmethod
    def update_coupon(self, coupon_id: CouponId, terms: CouponTerms) -> Coupon | None:
        """Replace a coupon's terms, or return None if it does not exist."""
        ...

    @abstractmethod
    def delete_coupon(self, coupon_id: CouponId) -> bool:
        """Delete a coupon. Return False if it did not exist."""
        ...

    @abstractmethod
    def record_redemption(
        self, code: CouponCode, payment_reference: str, amount: int, now: datetime
    ) -> Coupon | None:
        """Consume one use of a coupon for a confirmed payment.

        The increment is conditional and atomic: it only happens if the
        coupon is active, inside its validity window and under its cap at
        the moment of writing. Return the updated coupon, or None if the
        condition did not hold.

        Raises:
            DuplicateRedemptionError: If the payment reference was already used.
        """
        ...
