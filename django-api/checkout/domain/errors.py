"""Domain error codes for the checkout module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    COUPON_NOT_FOUND = "COUPON_NOT_FOUND"
    INVALID_COUPON_ID = "INVALID_COUPON_ID"
    INVALID_COUPON_CODE = "INVALID_COUPON_CODE"
    INVALID_COUPON_TERMS = "INVALID_COUPON_TERMS"
    DUPLICATE_COUPON_CODE = "DUPLICATE_COUPON_CODE"
    UNKNOWN_GRADE = "UNKNOWN_GRADE"
    INVALID_SELECTION = "INVALID_SELECTION"
    REDEMPTION_REJECTED = "REDEMPTION_REJECTED"
    DUPLICATE_REDEMPTION = "DUPLICATE_REDEMPTION"
    COUPON_STORE_UNAVAILABLE = "COUPON_STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class CouponNotFoundError(DomainError):
    """Raised when a coupon is not found by ID."""

    def __init__(self, coupon_id: str) -> None:
        super().__init__(
            code=ErrorCode.COUPON_NOT_FOUND,
            message="Coupon not found",
        )
        self.coupon_id = coupon_id


class InvalidCouponIdError(DomainError):
    """Raised when a coupon ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_COUPON_ID,
            message="Invalid coupon ID format",
        )


class InvalidCouponCodeError(DomainError):
    """Raised when a coupon code is blank or too long."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_COUPON_CODE,
            message=reason,
        )


class InvalidCouponTermsError(DomainError):
    """Raised when coupon discount, cap or validity window is inconsistent."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_COUPON_TERMS,
            message=reason,
        )


class DuplicateCouponCodeError(DomainError):
    """Raised when creating or renaming a coupon to a code already in use."""

    def __init__(self, code: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_COUPON_CODE,
            message="Coupon code already exists",
        )
        self.coupon_code = code


class UnknownGradeError(DomainError):
    """Raised when a grade has no entry in the price table."""

    def __init__(self, grade: str) -> None:
        super().__init__(
            code=ErrorCode.UNKNOWN_GRADE,
            message=f"Unknown grade: {grade}",
        )
        self.grade = grade


class InvalidSelectionError(DomainError):
    """Raised when a subject selection cannot be built."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_SELECTION,
            message=reason,
        )


class RedemptionRejectedError(DomainError):
    """Raised when a coupon cannot be redeemed for a payment."""

    def __init__(self, reason, message: str) -> None:
        super().__init__(
            code=ErrorCode.REDEMPTION_REJECTED,
            message=message,
        )
        self.reason = reason


class DuplicateRedemptionError(DomainError):
    """Raised when a payment reference has already redeemed a coupon."""

    def __init__(self, payment_reference: str) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_REDEMPTION,
            message="Payment has already been recorded against a coupon",
        )
        self.payment_reference = payment_reference


class CouponStoreUnavailableError(DomainError):
    """Raised by stores when the coupon lookup itself failed."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.COUPON_STORE_UNAVAILABLE,
            message="Coupon service is temporarily unavailable",
        )
