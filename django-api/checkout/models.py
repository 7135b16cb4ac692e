"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models


class Coupon(models.Model):
    """Persistence model for coupons."""

    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage (%)"
        FIXED = "fixed", "Fixed amount (XAF)"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=64, unique=True)
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(max_digits=12, decimal_places=2)
    max_uses = models.PositiveIntegerField(default=0, help_text="0 means unlimited.")
    used_count = models.PositiveIntegerField(default=0)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    is_active = models.BooleanField(default=True)
    created_by = models.CharField(max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="coupon_created_at_idx"),
        ]

    def __str__(self) -> str:
        return self.code


class CouponRedemption(models.Model):
    """One consumed use of a coupon, tied to a confirmed payment."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    coupon = models.ForeignKey(
        Coupon, on_delete=models.SET_NULL, null=True, related_name="redemptions"
    )
    code = models.CharField(max_length=64)
    payment_reference = models.CharField(max_length=255, unique=True)
    amount = models.PositiveIntegerField()
    redeemed_at = models.DateTimeField()

    class Meta:
        ordering = ["-redeemed_at"]
        indexes = [
            models.Index(fields=["code"], name="redemption_code_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.code} - {self.payment_reference}"
