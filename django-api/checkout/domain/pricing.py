"""Pricing engine: subject selections in, payable amount out.

All amounts are whole XAF units. Percentage discounts are computed with
``Decimal`` and the discount amount is rounded down to a whole unit, so the
same inputs always produce the same total.
"""

from collections.abc import Mapping
from decimal import ROUND_FLOOR, Decimal, InvalidOperation

from checkout.domain.errors import InvalidSelectionError, UnknownGradeError
from checkout.domain.models import (
    Discount,
    FixedDiscount,
    PercentageDiscount,
    PricingResult,
    SubjectSelection,
)

GRADE_PRICES: Mapping[str, int] = {
    "A": 50000,
    "B": 40000,
    "C": 30000,
    "D": 20000,
    "E": 15000,
    "F": 10000,
}

_HUNDRED = Decimal(100)


def price_for_grade(grade: str) -> int:
    """Return the table price for a grade.

    Raises:
        UnknownGradeError: If the grade is not in the price table.
    """
    key = grade.strip().upper() if isinstance(grade, str) else ""
    if key not in GRADE_PRICES:
        raise UnknownGradeError(str(grade))
    return GRADE_PRICES[key]


def select_subject(
    selections: Mapping[str, SubjectSelection], subject: str, grade: str
) -> dict[str, SubjectSelection]:
    """Return a copy of ``selections`` with ``subject`` set to ``grade``."""
    name = subject.strip() if isinstance(subject, str) else ""
    if not name:
        raise InvalidSelectionError("Subject name cannot be blank")
    price = price_for_grade(grade)
    updated = dict(selections)
    updated[name] = SubjectSelection(grade=grade.strip().upper(), price=price)
    return updated


def remove_subject(
    selections: Mapping[str, SubjectSelection], subject: str
) -> dict[str, SubjectSelection]:
    updated = dict(selections)
    updated.pop(subject, None)
    return updated


def build_selections(grades: Mapping[str, str]) -> dict[str, SubjectSelection]:
    """Build a selection mapping from ``{subject: grade}``."""
    selections: dict[str, SubjectSelection] = {}
    for subject, grade in grades.items():
        selections = select_subject(selections, subject, grade)
    return selections


def compute_subtotal(selections: Mapping[str, SubjectSelection]) -> int:
    return sum(selection.price for selection in selections.values())


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def _magnitude(value) -> Decimal:
    """Read a discount magnitude, treating anything non-numeric as zero."""
    try:
        magnitude = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return Decimal(0)
    if magnitude.is_nan():
        return Decimal(0)
    return magnitude


def apply_discount(subtotal: int, discount: Discount | None) -> PricingResult:
    """Apply at most one discount to ``subtotal``.

    Malformed discounts are normalised rather than rejected: a percentage is
    held to [0, 100], a fixed amount to [0, subtotal], a NaN or non-numeric
    magnitude counts as zero and an unrecognised discount as no discount.
    """
    if not isinstance(discount, (PercentageDiscount, FixedDiscount)) or subtotal <= 0:
        return PricingResult(subtotal=subtotal, discount_amount=0, total=subtotal)

    magnitude = _magnitude(discount.magnitude)
    if isinstance(discount, PercentageDiscount):
        percent = min(max(magnitude, Decimal(0)), _HUNDRED)
        amount = _floor(Decimal(subtotal) * percent / _HUNDRED)
    else:
        amount = _floor(min(max(magnitude, Decimal(0)), Decimal(subtotal)))

    amount = min(amount, subtotal)
    return PricingResult(subtotal=subtotal, discount_amount=amount, total=subtotal - amount)


def price_selections(
    selections: Mapping[str, SubjectSelection], discount: Discount | None = None
) -> PricingResult:
    return apply_discount(compute_subtotal(selections), discount)
