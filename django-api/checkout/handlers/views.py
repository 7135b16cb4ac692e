"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

from django.conf import settings
from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from checkout.domain import RejectionReason
from checkout.domain.errors import DomainError, ErrorCode
from checkout.domain.pricing import GRADE_PRICES
from checkout.handlers.serializers import (
    CouponSerializer,
    CouponValidationSerializer,
    CouponWriteSerializer,
    QuoteRequestSerializer,
    QuoteSerializer,
    RedemptionRequestSerializer,
)
from checkout.services.checkout_service import CheckoutService
from checkout.services.coupon_service import CouponService
from checkout.stores.django_store import DjangoCouponStore

ERROR_STATUS = {
    ErrorCode.COUPON_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_COUPON_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_COUPON_CODE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_COUPON_TERMS: status.HTTP_400_BAD_REQUEST,
    ErrorCode.UNKNOWN_GRADE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_SELECTION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.DUPLICATE_COUPON_CODE: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_REDEMPTION: status.HTTP_409_CONFLICT,
    ErrorCode.REDEMPTION_REJECTED: status.HTTP_409_CONFLICT,
    ErrorCode.COUPON_STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(error: DomainError) -> Response:
    body = {"error": {"code": error.code.value, "message": error.message}}
    reason = getattr(error, "reason", None)
    if isinstance(reason, RejectionReason):
        body["error"]["reason"] = reason.value
    return Response(body, status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST))


def coupon_service() -> CouponService:
    return CouponService(DjangoCouponStore())


def _currency() -> str:
    return getattr(settings, "CHECKOUT_CURRENCY", "XAF")


class GradePriceListView(APIView):
    """Handler for GET /api/pricing/grades"""

    def get(self, request: Request) -> Response:
        grades = [{"grade": grade, "price": price} for grade, price in GRADE_PRICES.items()]
        return Response({"currency": _currency(), "grades": grades})


class QuoteView(APIView):
    """Handler for POST /api/checkout/quote"""

    def post(self, request: Request) -> Response:
        payload = QuoteRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        service = CheckoutService(coupon_service())
        try:
            quote = service.quote(
                payload.validated_data["selections"],
                payload.validated_data.get("coupon_code"),
            )
        except DomainError as error:
            return error_response(error)
        return Response(QuoteSerializer(quote, context={"currency": _currency()}).data)


class CouponValidateView(APIView):
    """Handler for GET /api/coupons/validate?code="""

    def get(self, request: Request) -> Response:
        outcome = coupon_service().validate_code(request.query_params.get("code", ""))
        data = CouponValidationSerializer(outcome).data
        if outcome.reason is RejectionReason.INVALID_INPUT:
            return Response(data, status=status.HTTP_400_BAD_REQUEST)
        if outcome.reason is RejectionReason.LOOKUP_FAILED:
            return Response(data, status=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(data)


class CouponListView(APIView):
    """Handler for GET/POST /api/coupons"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        coupons = coupon_service().list_coupons()
        return Response(CouponSerializer(coupons, many=True).data)

    def post(self, request: Request) -> Response:
        payload = CouponWriteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            coupon = coupon_service().create_coupon(
                created_by=request.user.get_username(), **payload.validated_data
            )
        except DomainError as error:
            return error_response(error)
        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)


class CouponCodeGenerateView(APIView):
    """Handler for POST /api/coupons/generate-code"""

    permission_classes = [IsAdminUser]

    def post(self, request: Request) -> Response:
        return Response({"code": coupon_service().generate_code()})


class CouponRedemptionView(APIView):
    """Handler for POST /api/coupons/redemptions

    Called once a payment is confirmed, never during checkout.
    """

    permission_classes = [IsAdminUser]

    def post(self, request: Request) -> Response:
        payload = RedemptionRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            coupon = coupon_service().redeem(**payload.validated_data)
        except DomainError as error:
            return error_response(error)
        return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)


class CouponDetailView(APIView):
    """Handler for GET/PATCH/DELETE /api/coupons/{coupon_id}"""

    permission_classes = [IsAdminUser]

    def get(self, request: Request, coupon_id: str) -> Response:
        try:
            coupon = coupon_service().get_coupon(coupon_id)
        except DomainError as error:
            return error_response(error)
        return Response(CouponSerializer(coupon).data)

    def patch(self, request: Request, coupon_id: str) -> Response:
        payload = CouponWriteSerializer(data=request.data, partial=True)
        payload.is_valid(raise_exception=True)
        try:
            coupon = coupon_service().update_coupon(coupon_id, **payload.validated_data)
        except DomainError as error:
            return error_response(error)
        return Response(CouponSerializer(coupon).data)

    def delete(self, request: Request, coupon_id: str) -> Response:
        try:
            coupon_service().delete_coupon(coupon_id)
        except DomainError as error:
            return error_response(error)
        return Response(status=status.HTTP_204_NO_CONTENT)
