from django.urls import path

from checkout.handlers import (
    CouponCodeGenerateView,
    CouponDetailView,
    CouponListView,
    CouponRedemptionView,
    CouponValidateView,
    GradePriceListView,
    QuoteView,
)

urlpatterns = [
    path("pricing/grades", GradePriceListView.as_view(), name="grade-price-list"),
    path("checkout/quote", QuoteView.as_view(), name="checkout-quote"),
    path("coupons", CouponListView.as_view(), name="coupon-list"),
    path("coupons/validate", CouponValidateView.as_view(), name="coupon-validate"),
    path("coupons/generate-code", CouponCodeGenerateView.as_view(), name="coupon-generate-code"),
    path("coupons/redemptions", CouponRedemptionView.as_view(), name="coupon-redemptions"),
    path("coupons/<str:coupon_id>", CouponDetailView.as_view(), name="coupon-detail"),
]
