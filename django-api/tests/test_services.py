"""Unit tests for CouponService and CheckoutService.

These test error handling and domain error mapping.
Run with: pytest tests/test_services.py -v
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest

from checkout.domain import DiscountType, PricingResult, RejectionReason
from checkout.domain.errors import (
    CouponNotFoundError,
    DuplicateCouponCodeError,
    DuplicateRedemptionError,
    InvalidCouponCodeError,
    InvalidCouponIdError,
    InvalidCouponTermsError,
    RedemptionRejectedError,
    UnknownGradeError,
)
from checkout.services.checkout_service import CheckoutService
from checkout.services.coupon_service import CODE_ALPHABET, CouponService


class TestCouponServiceCreate:
    """Tests for CouponService.create_coupon."""

    def test_create_applies_defaults(self, coupon_service, now):
        coupon = coupon_service.create_coupon("WELCOME", "percentage", 10, created_by="admin")
        assert coupon.code == "WELCOME"
        assert coupon.discount_type is DiscountType.PERCENTAGE
        assert coupon.discount_value == Decimal("10")
        assert coupon.max_uses == 0
        assert coupon.used_count == 0
        assert coupon.is_active
        assert coupon.valid_from == now
        assert coupon.valid_until == now + timedelta(days=30)
        assert coupon.created_by == "admin"

    def test_create_trims_code(self, coupon_service):
        assert coupon_service.create_coupon("  FLAT5K ", "fixed", 5000).code == "FLAT5K"

    def test_create_blank_code_raises_error(self, coupon_service):
        with pytest.raises(InvalidCouponCodeError):
            coupon_service.create_coupon("   ", "fixed", 5000)

    def test_create_duplicate_code_raises_error(self, coupon_service):
        coupon_service.create_coupon("WELCOME", "percentage", 10)
        with pytest.raises(DuplicateCouponCodeError):
            coupon_service.create_coupon("WELCOME", "fixed", 1000)

    @pytest.mark.parametrize(
        "discount_type, value",
        [("percentage", 101), ("percentage", -1), ("fixed", -100), ("bogus", 10), ("fixed", "ten")],
    )
    def test_create_invalid_terms_raises_error(self, coupon_service, discount_type, value):
        with pytest.raises(InvalidCouponTermsError):
            coupon_service.create_coupon("BAD", discount_type, value)

    def test_create_inverted_window_raises_error(self, coupon_service, now):
        with pytest.raises(InvalidCouponTermsError):
            coupon_service.create_coupon(
                "BAD", "fixed", 1000, valid_from=now, valid_until=now - timedelta(days=1)
            )

    def test_create_negative_cap_raises_error(self, coupon_service):
        with pytest.raises(InvalidCouponTermsError):
            coupon_service.create_coupon("BAD", "fixed", 1000, max_uses=-1)


class TestCouponServiceLookup:
    """Tests for get/update/delete on CouponService."""

    def test_get_coupon_invalid_id_raises_error(self, coupon_service):
        """get_coupon raises InvalidCouponIdError for malformed UUID."""
        with pytest.raises(InvalidCouponIdError):
            coupon_service.get_coupon("not-a-uuid")

    def test_get_coupon_not_found_raises_error(self, coupon_service):
        """get_coupon raises CouponNotFoundError when store returns None."""
        with pytest.raises(CouponNotFoundError):
            coupon_service.get_coupon(str(uuid.uuid4()))

    def test_list_coupons_newest_first(self, store, coupon_service, make_coupon, now):
        older = make_coupon(code="OLD", created_at=now - timedelta(days=5))
        newer = make_coupon(code="NEW", created_at=now - timedelta(days=1))
        store.coupons = {"OLD": older, "NEW": newer}
        assert [c.code for c in coupon_service.list_coupons()] == ["NEW", "OLD"]

    def test_update_coupon_changes_terms(self, coupon_service):
        created = coupon_service.create_coupon("WELCOME", "percentage", 10)
        updated = coupon_service.update_coupon(str(created.id), discount_value=25, is_active=False)
        assert updated.discount_value == Decimal("25")
        assert not updated.is_active
        assert updated.code == "WELCOME"

    def test_update_revalidates_merged_terms(self, coupon_service):
        created = coupon_service.create_coupon("FLAT", "fixed", 5000)
        with pytest.raises(InvalidCouponTermsError):
            coupon_service.update_coupon(str(created.id), discount_type="percentage")

    def test_update_rename_to_existing_code_raises_error(self, coupon_service):
        coupon_service.create_coupon("TAKEN", "fixed", 1000)
        created = coupon_service.create_coupon("FREE", "fixed", 1000)
        with pytest.raises(DuplicateCouponCodeError):
            coupon_service.update_coupon(str(created.id), code="TAKEN")

    def test_update_cap_below_recorded_uses_raises_error(self, store, coupon_service, make_coupon):
        coupon = make_coupon(max_uses=20, used_count=10)
        store.coupons[coupon.code] = coupon
        with pytest.raises(InvalidCouponTermsError):
            coupon_service.update_coupon(str(coupon.id), max_uses=5)
        assert store.coupons[coupon.code].max_uses == 20

    @pytest.mark.parametrize("max_uses", [10, 0, None])
    def test_update_cap_to_recorded_uses_or_unlimited(self, store, coupon_service, make_coupon, max_uses):
        coupon = make_coupon(max_uses=20, used_count=10)
        store.coupons[coupon.code] = coupon
        updated = coupon_service.update_coupon(str(coupon.id), max_uses=max_uses)
        assert updated.max_uses == (max_uses or 0)

    def test_update_unknown_field_raises_error(self, coupon_service):
        created = coupon_service.create_coupon("FLAT", "fixed", 1000)
        with pytest.raises(InvalidCouponTermsError):
            coupon_service.update_coupon(str(created.id), used_count=0)

    def test_delete_coupon(self, store, coupon_service):
        created = coupon_service.create_coupon("FLAT", "fixed", 1000)
        coupon_service.delete_coupon(str(created.id))
        assert store.coupons == {}

    def test_delete_missing_coupon_raises_error(self, coupon_service):
        with pytest.raises(CouponNotFoundError):
            coupon_service.delete_coupon(str(uuid.uuid4()))

    def test_generate_code_uses_unambiguous_alphabet(self, coupon_service):
        code = coupon_service.generate_code()
        assert len(code) == 8
        assert set(code) <= set(CODE_ALPHABET)


class TestCouponServiceValidate:
    """Tests for CouponService.validate_code."""

    def test_uses_clock_when_now_not_given(self, store, make_coupon, now):
        store.coupons["SAVE20"] = make_coupon(valid_until=now + timedelta(minutes=5))
        early = CouponService(store, clock=lambda: now)
        late = CouponService(store, clock=lambda: now + timedelta(hours=1))
        assert early.validate_code("SAVE20").is_valid
        assert late.validate_code("SAVE20").reason is RejectionReason.EXPIRED


class TestCouponServiceRedeem:
    """Tests for CouponService.redeem."""

    def test_redeem_increments_usage(self, store, coupon_service, make_coupon):
        store.coupons["SAVE20"] = make_coupon(max_uses=2, used_count=0)
        coupon = coupon_service.redeem("SAVE20", "MOMO-001", 72000)
        assert coupon.used_count == 1
        assert store.redemptions == {"MOMO-001": "SAVE20"}

    def test_redeem_at_cap_is_rejected(self, store, coupon_service, make_coupon):
        store.coupons["SAVE20"] = make_coupon(max_uses=10, used_count=10)
        with pytest.raises(RedemptionRejectedError) as exc_info:
            coupon_service.redeem("SAVE20", "MOMO-002", 72000)
        assert exc_info.value.reason is RejectionReason.USAGE_CAP_REACHED
        assert store.coupons["SAVE20"].used_count == 10

    def test_redeem_unknown_code_is_rejected(self, coupon_service):
        with pytest.raises(RedemptionRejectedError) as exc_info:
            coupon_service.redeem("NOPE", "MOMO-003", 1000)
        assert exc_info.value.reason is RejectionReason.NOT_FOUND

    def test_redeem_same_payment_twice_raises_error(self, store, coupon_service, make_coupon):
        store.coupons["SAVE20"] = make_coupon()
        coupon_service.redeem("SAVE20", "MOMO-004", 72000)
        with pytest.raises(DuplicateRedemptionError):
            coupon_service.redeem("SAVE20", "MOMO-004", 72000)

    def test_redeem_losing_race_is_rejected(self, store, coupon_service, make_coupon, monkeypatch):
        store.coupons["SAVE20"] = make_coupon(max_uses=1, used_count=0)
        monkeypatch.setattr(store, "record_redemption", lambda *args: None)
        with pytest.raises(RedemptionRejectedError) as exc_info:
            coupon_service.redeem("SAVE20", "MOMO-005", 72000)
        assert exc_info.value.reason is RejectionReason.USAGE_CAP_REACHED


class TestCheckoutService:
    """Tests for CheckoutService.quote."""

    @pytest.fixture
    def checkout(self, coupon_service) -> CheckoutService:
        return CheckoutService(coupon_service)

    def test_quote_without_coupon(self, checkout):
        quote = checkout.quote({"Mathematics": "A", "Physics": "B"})
        assert quote.pricing == PricingResult(subtotal=90000, discount_amount=0, total=90000)
        assert quote.coupon is None

    @pytest.mark.parametrize("code", [None, ""])
    def test_quote_without_code_has_no_coupon_outcome(self, checkout, code):
        assert checkout.quote({"Mathematics": "A"}, code).coupon is None

    def test_quote_whitespace_code_is_invalid_input(self, store, checkout):
        quote = checkout.quote({"Mathematics": "A"}, "   ")
        assert quote.coupon.reason is RejectionReason.INVALID_INPUT
        assert quote.pricing.total == 50000
        assert store.lookups == []

    def test_quote_with_percentage_coupon(self, store, checkout, make_coupon):
        store.coupons["SAVE20"] = make_coupon()
        quote = checkout.quote({"Mathematics": "A", "Physics": "B"}, "SAVE20")
        assert quote.pricing == PricingResult(subtotal=90000, discount_amount=18000, total=72000)
        assert quote.coupon.is_valid

    def test_quote_with_oversized_fixed_coupon(self, store, checkout, make_coupon):
        store.coupons["BIG"] = make_coupon(
            code="BIG", discount_type=DiscountType.FIXED, discount_value=Decimal("100000")
        )
        quote = checkout.quote({"Mathematics": "A", "Physics": "B"}, "BIG")
        assert quote.pricing == PricingResult(subtotal=90000, discount_amount=90000, total=0)

    def test_quote_with_rejected_coupon_is_undiscounted(self, store, checkout, make_coupon, now):
        store.coupons["OLD"] = make_coupon(code="OLD", valid_until=now - timedelta(days=1))
        quote = checkout.quote({"Mathematics": "A"}, "OLD")
        assert quote.pricing.total == 50000
        assert quote.coupon.reason is RejectionReason.EXPIRED

    def test_quote_does_not_consume_uses(self, store, checkout, make_coupon):
        store.coupons["SAVE20"] = make_coupon(max_uses=1)
        checkout.quote({"Mathematics": "A"}, "SAVE20")
        assert store.coupons["SAVE20"].used_count == 0

    def test_quote_unknown_grade_raises_error(self, checkout):
        with pytest.raises(UnknownGradeError):
            checkout.quote({"Mathematics": "S"})
