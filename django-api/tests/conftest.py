"""Pytest configuration and shared fixtures."""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from checkout.domain import Coupon, CouponCode, CouponId, CouponTerms, DiscountType
from checkout.domain.errors import DuplicateRedemptionError
from checkout.domain.validation import check_coupon
from checkout.services.coupon_service import CouponService
from checkout.stores.interfaces import CouponStore

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


class InMemoryCouponStore(CouponStore):
    """Dict-backed CouponStore for service tests."""

    def __init__(self, coupons=()) -> None:
        self.coupons: dict[str, Coupon] = {coupon.code: coupon for coupon in coupons}
        self.redemptions: dict[str, str] = {}
        self.lookups: list[str] = []

    def find_by_code(self, code: CouponCode) -> Coupon | None:
        self.lookups.append(code.value)
        return self.coupons.get(code.value)

    def list_coupons(self) -> list[Coupon]:
        return sorted(self.coupons.values(), key=lambda c: c.created_at, reverse=True)

    def get_coupon(self, coupon_id: CouponId) -> Coupon | None:
        return next((c for c in self.coupons.values() if c.id == coupon_id), None)

    def code_exists(self, code: CouponCode) -> bool:
        return code.value in self.coupons

    def create_coupon(self, terms: CouponTerms, created_by: str | None) -> Coupon:
        coupon = Coupon(
            id=CouponId(value=uuid.uuid4()),
            code=terms.code,
            discount_type=terms.discount_type,
            discount_value=terms.discount_value,
            max_uses=terms.max_uses,
            used_count=0,
            valid_from=terms.valid_from,
            valid_until=terms.valid_until,
            is_active=terms.is_active,
            created_by=created_by,
            created_at=NOW,
            updated_at=NOW,
        )
        self.coupons[coupon.code] = coupon
        return coupon

    def update_coupon(self, coupon_id: CouponId, terms: CouponTerms) -> Coupon | None:
        coupon = self.get_coupon(coupon_id)
        if coupon is None:
            return None
        del self.coupons[coupon.code]
        updated = replace(
            coupon,
            code=terms.code,
            discount_type=terms.discount_type,
            discount_value=terms.discount_value,
            max_uses=terms.max_uses,
            valid_from=terms.valid_from,
            valid_until=terms.valid_until,
            is_active=terms.is_active,
        )
        self.coupons[updated.code] = updated
        return updated

    def delete_coupon(self, coupon_id: CouponId) -> bool:
        coupon = self.get_coupon(coupon_id)
        if coupon is None:
            return False
        del self.coupons[coupon.code]
        return True

    def record_redemption(self, code, payment_reference, amount, now):
        if payment_reference in self.redemptions:
            raise DuplicateRedemptionError(payment_reference)
        coupon = self.coupons.get(code.value)
        if coupon is None or check_coupon(coupon, now) is not None:
            return None
        updated = replace(coupon, used_count=coupon.used_count + 1)
        self.coupons[code.value] = updated
        self.redemptions[payment_reference] = code.value
        return updated


def build_coupon(**overrides) -> Coupon:
    fields = dict(
        id=CouponId(value=uuid.uuid4()),
        code="SAVE20",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
        max_uses=0,
        used_count=0,
        valid_from=NOW - timedelta(days=10),
        valid_until=NOW + timedelta(days=10),
        is_active=True,
        created_by="admin",
        created_at=NOW - timedelta(days=10),
        updated_at=NOW - timedelta(days=10),
    )
    fields.update(overrides)
    return Coupon(**fields)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_coupon():
    return build_coupon


@pytest.fixture
def store() -> InMemoryCouponStore:
    return InMemoryCouponStore()


@pytest.fixture
def coupon_service(store: InMemoryCouponStore) -> CouponService:
    return CouponService(store, clock=lambda: NOW)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def admin_api_client(admin_user) -> APIClient:
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()
