"""Django ORM implementation of the CouponStore."""

import hashlib
import logging
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q

from checkout import models as orm
from checkout.domain import Coupon, CouponCode, CouponId, CouponTerms, DiscountType
from checkout.domain.errors import CouponStoreUnavailableError, DuplicateRedemptionError
from checkout.stores.interfaces import CouponStore

logger = logging.getLogger(__name__)

COUPON_LIST_CACHE_KEY = "coupons:list"


def coupon_code_cache_key(code: str) -> str:
    # Codes may hold spaces or non-ASCII characters that memcached rejects in keys.
    digest = hashlib.sha256(code.encode("utf-8")).hexdigest()
    return f"coupons:code:{digest}"


def invalidate_coupon_cache(code: str) -> None:
    try:
        cache.delete_many([COUPON_LIST_CACHE_KEY, coupon_code_cache_key(code)])
    except Exception:
        logger.error("Could not invalidate cached coupon %s", code, exc_info=True)


def _cache_get(key: str):
    """Read from the cache, treating a cache outage as a miss."""
    try:
        return cache.get(key)
    except Exception:
        logger.warning("Coupon cache read failed for %s", key, exc_info=True)
        return None


def _cache_set(key: str, value) -> None:
    try:
        cache.set(key, value, _cache_timeout())
    except Exception:
        logger.warning("Coupon cache write failed for %s", key, exc_info=True)


def _cache_timeout() -> int:
    return getattr(settings, "COUPON_CACHE_TIMEOUT", 300)


def _to_domain(row: orm.Coupon) -> Coupon:
    return Coupon(
        id=CouponId(value=row.id),
        code=row.code,
        discount_type=DiscountType(row.discount_type),
        discount_value=Decimal(row.discount_value),
        max_uses=row.max_uses,
        used_count=row.used_count,
        valid_from=row.valid_from,
        valid_until=row.valid_until,
        is_active=row.is_active,
        created_by=row.created_by or None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _apply_terms(row: orm.Coupon, terms: CouponTerms) -> None:
    row.code = terms.code
    row.discount_type = terms.discount_type.value
    row.discount_value = terms.discount_value
    row.max_uses = terms.max_uses
    row.valid_from = terms.valid_from
    row.valid_until = terms.valid_until
    row.is_active = terms.is_active


class DjangoCouponStore(CouponStore):
    """Database-backed coupon store using Django ORM and the Django cache."""

    def find_by_code(self, code: CouponCode) -> Coupon | None:
        key = coupon_code_cache_key(code.value)
        cached = _cache_get(key)
        if cached is not None:
            return cached
        try:
            row = orm.Coupon.objects.filter(code=code.value).first()
        except DatabaseError as exc:
            raise CouponStoreUnavailableError() from exc
        if row is None:
            return None
        coupon = _to_domain(row)
        _cache_set(key, coupon)
        return coupon

    def list_coupons(self) -> list[Coupon]:
        cached = _cache_get(COUPON_LIST_CACHE_KEY)
        if cached is not None:
            return cached
        coupons = [_to_domain(row) for row in orm.Coupon.objects.all()]
        _cache_set(COUPON_LIST_CACHE_KEY, coupons)
        return coupons

    def get_coupon(self, coupon_id: CouponId) -> Coupon | None:
        row = orm.Coupon.objects.filter(id=coupon_id.value).first()
        return _to_domain(row) if row is not None else None

    def code_exists(self, code: CouponCode) -> bool:
        return orm.Coupon.objects.filter(code=code.value).exists()

    def create_coupon(self, terms: CouponTerms, created_by: str | None) -> Coupon:
        row = orm.Coupon(created_by=created_by or "")
        _apply_terms(row, terms)
        row.save()
        return _to_domain(row)

    def update_coupon(self, coupon_id: CouponId, terms: CouponTerms) -> Coupon | None:
        with transaction.atomic():
            row = orm.Coupon.objects.select_for_update().filter(id=coupon_id.value).first()
            if row is None:
                return None
            # Redemptions may have landed since the service read the coupon.
            terms.check_cap_covers_usage(row.used_count)
            _apply_terms(row, terms)
            row.save()
        return _to_domain(row)

    def delete_coupon(self, coupon_id: CouponId) -> bool:
        row = orm.Coupon.objects.filter(id=coupon_id.value).first()
        if row is None:
            return False
        row.delete()
        return True

    def record_redemption(
        self, code: CouponCode, payment_reference: str, amount: int, now: datetime
    ) -> Coupon | None:
        if orm.CouponRedemption.objects.filter(payment_reference=payment_reference).exists():
            raise DuplicateRedemptionError(payment_reference)

        try:
            with transaction.atomic():
                updated = (
                    orm.Coupon.objects.filter(
                        code=code.value,
                        is_active=True,
                        valid_from__lte=now,
                        valid_until__gte=now,
                    )
                    .filter(Q(max_uses=0) | Q(used_count__lt=F("max_uses")))
                    .update(used_count=F("used_count") + 1, updated_at=now)
                )
                if not updated:
                    return None
                row = orm.Coupon.objects.get(code=code.value)
                orm.CouponRedemption.objects.create(
                    coupon=row,
                    code=row.code,
                    payment_reference=payment_reference,
                    amount=amount,
                    redeemed_at=now,
                )
        except IntegrityError as exc:
            raise DuplicateRedemptionError(payment_reference) from exc
        finally:
            # Queryset updates bypass post_save, so drop cached copies here.
            invalidate_coupon_cache(code.value)

        logger.info(
            "Recorded redemption of coupon %s for payment %s (%s/%s uses)",
            row.code,
            payment_reference,
            row.used_count,
            row.max_uses or "unlimited",
        )
        return _to_domain(row)
