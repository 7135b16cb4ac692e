from checkout.handlers.views import (
    CouponCodeGenerateView,
    CouponDetailView,
    CouponListView,
    CouponRedemptionView,
    CouponValidateView,
    GradePriceListView,
    QuoteView,
)

__all__ = [
    "CouponCodeGenerateView",
    "CouponDetailView",
    "CouponListView",
    "CouponRedemptionView",
    "CouponValidateView",
    "GradePriceListView",
    "QuoteView",
]
