"""Serializers for request parsing and for turning domain models into API responses."""

from rest_framework import serializers

from checkout.domain import DiscountType, FixedDiscount, Money, PercentageDiscount
from checkout.domain.value_objects import MAX_COUPON_CODE_LENGTH

DISCOUNT_TYPE_CHOICES = [discount_type.value for discount_type in DiscountType]


class CouponSerializer(serializers.Serializer):
    """Serializer for the Coupon domain model."""

    id = serializers.UUIDField(source="id.value")
    code = serializers.CharField()
    discount_type = serializers.CharField(source="discount_type.value")
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2, coerce_to_string=False)
    max_uses = serializers.IntegerField()
    used_count = serializers.IntegerField()
    remaining_uses = serializers.IntegerField(allow_null=True)
    valid_from = serializers.DateTimeField()
    valid_until = serializers.DateTimeField()
    is_active = serializers.BooleanField()
    created_by = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class CouponWriteSerializer(serializers.Serializer):
    """Input for creating a coupon, or with ``partial=True`` for updating one."""

    code = serializers.CharField(max_length=MAX_COUPON_CODE_LENGTH)
    discount_type = serializers.ChoiceField(choices=DISCOUNT_TYPE_CHOICES)
    discount_value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    max_uses = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    valid_from = serializers.DateTimeField(required=False, allow_null=True)
    valid_until = serializers.DateTimeField(required=False, allow_null=True)
    is_active = serializers.BooleanField(default=True)


def _discount_data(discount) -> dict | None:
    if isinstance(discount, PercentageDiscount):
        return {"type": DiscountType.PERCENTAGE.value, "magnitude": discount.magnitude}
    if isinstance(discount, FixedDiscount):
        return {"type": DiscountType.FIXED.value, "magnitude": discount.magnitude}
    return None


class CouponValidationSerializer(serializers.Serializer):
    """Serializer for CouponValidationOutcome."""

    is_valid = serializers.BooleanField()
    reason = serializers.SerializerMethodField()
    message = serializers.CharField()
    discount = serializers.SerializerMethodField()
    coupon = serializers.SerializerMethodField()

    def get_reason(self, outcome) -> str | None:
        return outcome.reason.value if outcome.reason is not None else None

    def get_discount(self, outcome) -> dict | None:
        data = _discount_data(outcome.discount)
        if data is not None:
            data["magnitude"] = float(data["magnitude"])
        return data

    def get_coupon(self, outcome) -> dict | None:
        coupon = outcome.coupon
        if coupon is None:
            return None
        field = serializers.DateTimeField()
        return {
            "code": coupon.code,
            "discount_type": coupon.discount_type.value,
            "discount_value": float(coupon.discount_value),
            "max_uses": coupon.max_uses,
            "valid_from": field.to_representation(coupon.valid_from),
            "valid_until": field.to_representation(coupon.valid_until),
            "is_active": coupon.is_active,
        }


class QuoteRequestSerializer(serializers.Serializer):
    selections = serializers.DictField(child=serializers.CharField(), allow_empty=True)
    coupon_code = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )


class SubjectSelectionSerializer(serializers.Serializer):
    grade = serializers.CharField()
    price = serializers.IntegerField()


class QuoteSerializer(serializers.Serializer):
    """Serializer for a checkout Quote."""

    selections = serializers.DictField(child=SubjectSelectionSerializer())
    subtotal = serializers.IntegerField(source="pricing.subtotal")
    discount_amount = serializers.IntegerField(source="pricing.discount_amount")
    total = serializers.IntegerField(source="pricing.total")
    currency = serializers.SerializerMethodField()
    display = serializers.SerializerMethodField()
    coupon = serializers.SerializerMethodField()

    def get_currency(self, quote) -> str:
        return self.context.get("currency", "XAF")

    def get_display(self, quote) -> dict:
        """Human-readable amounts for receipts and the payment step."""
        currency = self.get_currency(quote)
        return {
            "subtotal": str(Money(quote.pricing.subtotal, currency)),
            "discount_amount": str(Money(quote.pricing.discount_amount, currency)),
            "total": str(Money(quote.pricing.total, currency)),
        }

    def get_coupon(self, quote) -> dict | None:
        if quote.coupon is None:
            return None
        return CouponValidationSerializer(quote.coupon).data


class RedemptionRequestSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=MAX_COUPON_CODE_LENGTH)
    payment_reference = serializers.CharField(max_length=255)
    amount = serializers.IntegerField(min_value=0)
