"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID

MAX_COUPON_CODE_LENGTH = 64


@dataclass(frozen=True)
class CouponId:
    """Unique identifier for a Coupon."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class CouponCode:
    """Coupon code as entered, without surrounding whitespace.

    Case is preserved: ``SAVE10`` and ``save10`` are different codes.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise ValueError("Coupon code must be a string")
        stripped = self.value.strip()
        if not stripped:
            raise ValueError("Coupon code cannot be blank")
        if len(stripped) > MAX_COUPON_CODE_LENGTH:
            raise ValueError(f"Coupon code cannot exceed {MAX_COUPON_CODE_LENGTH} characters")
        object.__setattr__(self, "value", stripped)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Money:
    """Whole-unit currency amount (XAF has no minor unit)."""

    amount: int
    currency: str = "XAF"

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise ValueError("Money amount must be a whole number")
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:,} {self.currency}"
