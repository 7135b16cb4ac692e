from django.contrib import admin

from checkout.models import Coupon, CouponRedemption


class CouponRedemptionInline(admin.TabularInline):
    model = CouponRedemption
    extra = 0
    readonly_fields = ["payment_reference", "amount", "redeemed_at"]
    can_delete = False


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "discount_type",
        "discount_value",
        "used_count",
        "max_uses",
        "valid_from",
        "valid_until",
        "is_active",
    ]
    list_filter = ["discount_type", "is_active"]
    search_fields = ["code", "created_by"]
    readonly_fields = ["used_count", "created_by", "created_at", "updated_at"]
    inlines = [CouponRedemptionInline]


@admin.register(CouponRedemption)
class CouponRedemptionAdmin(admin.ModelAdmin):
    list_display = ["code", "payment_reference", "amount", "redeemed_at"]
    search_fields = ["code", "payment_reference"]
    readonly_fields = ["coupon", "code", "payment_reference", "amount", "redeemed_at"]
