"""
Field Validation for Ledger Input

DESIGN DECISION: Every field rule lives here as a plain function.
Each validator takes ONE raw value and either:
- returns the normalized value (Decimal, date, stripped str, enum), or
- raises ValidationError naming the field and the reason.

Validators have no side effects and never touch storage.
The ledger runs them BEFORE any read or write, so a bad input
can never leave stored state half-modified.

IMPORTANT: Validation NEVER silently fixes issues.
A value with three decimal places is rejected, not rounded.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from cashflow.errors import ValidationError
from cashflow.models.ledger import IncomeCategory


ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MAX_DESCRIPTION_LENGTH = 200
MAX_DECIMAL_PLACES = 2
CENTS = Decimal("0.01")

DRAFT_FIELDS = {"amount", "date", "description", "category"}
OPTIONAL_FIELDS = {"is_recurring", "recurring_id"}
DERIVED_FIELDS = {"id", "timestamp", "balance_after"}

# Accept the camelCase keys the mobile app used
FIELD_ALIASES = {
    "isRecurring": "is_recurring",
    "recurringId": "recurring_id",
    "balanceAfter": "balance_after",
}


def _count_decimal_places(value: Decimal) -> int:
    """Count fractional digits from the fixed-point string form."""
    text = format(value, "f")
    if "." not in text:
        return 0
    fraction = text.split(".", 1)[1].rstrip("0")
    return len(fraction)


def validate_amount(amount: Any, field: str = "amount") -> Decimal:
    """
    Validate a money amount.

    Rules:
    - int, float or Decimal (bools and strings are not numbers here)
    - finite
    - greater than zero
    - at most 2 decimal places

    Returns the amount as a Decimal with exactly 2 places.
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise ValidationError(field, "Must be a valid number")

    if isinstance(amount, float):
        if math.isnan(amount):
            raise ValidationError(field, "Must be a valid number")
        if not math.isfinite(amount):
            raise ValidationError(field, "Must be a finite number")
        # repr gives the shortest string that round-trips the float
        value = Decimal(repr(amount))
    else:
        try:
            value = Decimal(amount)
        except (InvalidOperation, ValueError) as e:
            raise ValidationError(field, "Must be a valid number") from e
        if value.is_nan():
            raise ValidationError(field, "Must be a valid number")
        if not value.is_finite():
            raise ValidationError(field, "Must be a finite number")

    if value <= 0:
        raise ValidationError(field, "Must be greater than 0")

    if _count_decimal_places(value) > MAX_DECIMAL_PLACES:
        raise ValidationError(field, "Maximum 2 decimal places allowed")

    try:
        return value.quantize(CENTS)
    except InvalidOperation as e:
        raise ValidationError(field, "Is too large") from e


def validate_date(value: Any, field: str = "date") -> date:
    """
    Validate a calendar date in YYYY-MM-DD form.

    Future dates are allowed. A datetime.date instance is accepted as is.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        return value

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string")

    if not ISO_DATE_PATTERN.match(value):
        raise ValidationError(field, "Must be in YYYY-MM-DD format")

    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(field, "Must be a valid date") from e


def validate_description(description: Any) -> str:
    """Non-empty after trimming, at most 200 characters."""
    if not isinstance(description, str):
        raise ValidationError("description", "Must be a string")
    if not description.strip():
        raise ValidationError("description", "Cannot be empty")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            "description",
            f"Maximum {MAX_DESCRIPTION_LENGTH} characters allowed",
        )
    return description.strip()


def validate_category(category: Any) -> IncomeCategory:
    """Must be one of the fixed income categories."""
    if isinstance(category, IncomeCategory):
        return category
    if not isinstance(category, str):
        raise ValidationError("category", "Must be a string")
    try:
        return IncomeCategory(category)
    except ValueError as e:
        valid = ", ".join(c.value for c in IncomeCategory)
        raise ValidationError("category", f"Must be one of: {valid}") from e


def _validate_recurring_tags(fields: Mapping[str, Any]) -> dict[str, Any]:
    tags: dict[str, Any] = {}
    if "is_recurring" in fields and fields["is_recurring"] is not None:
        if not isinstance(fields["is_recurring"], bool):
            raise ValidationError("is_recurring", "Must be true or false")
        tags["is_recurring"] = fields["is_recurring"]
    if "recurring_id" in fields and fields["recurring_id"] is not None:
        if not isinstance(fields["recurring_id"], str):
            raise ValidationError("recurring_id", "Must be a string")
        tags["recurring_id"] = fields["recurring_id"]
    return tags


def _normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise ValidationError("entry", "Must be a mapping of field names to values")
    return {FIELD_ALIASES.get(key, key): value for key, value in raw.items()}


def validate_income_entry(draft: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate a complete new entry draft.

    Returns a dict of normalized fields ready for IncomeEntry(...).
    id, timestamp and balance_after are assigned by the ledger,
    so a draft must not carry them.
    """
    fields = _normalize_keys(draft)

    for key in fields:
        if key in DERIVED_FIELDS:
            raise ValidationError(key, "Is assigned by the ledger and cannot be supplied")
        if key not in DRAFT_FIELDS | OPTIONAL_FIELDS:
            raise ValidationError(key, "Unknown field")

    for required in ("amount", "date", "description", "category"):
        if required not in fields:
            raise ValidationError(required, "Is required")

    normalized = {
        "amount": validate_amount(fields["amount"]),
        "date": validate_date(fields["date"]),
        "description": validate_description(fields["description"]),
        "category": validate_category(fields["category"]),
    }
    normalized.update(_validate_recurring_tags(fields))
    return normalized


def validate_income_update(updates: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate a partial update. Only the supplied fields are checked.
    """
    fields = _normalize_keys(updates)

    if not fields:
        raise ValidationError("updates", "At least one field must be supplied")

    for key in fields:
        if key in DERIVED_FIELDS:
            raise ValidationError(key, "Cannot be updated")
        if key not in DRAFT_FIELDS | OPTIONAL_FIELDS:
            raise ValidationError(key, "Unknown field")

    normalized: dict[str, Any] = {}
    if "amount" in fields:
        normalized["amount"] = validate_amount(fields["amount"])
    if "date" in fields:
        normalized["date"] = validate_date(fields["date"])
    if "description" in fields:
        normalized["description"] = validate_description(fields["description"])
    if "category" in fields:
        normalized["category"] = validate_category(fields["category"])

    # Recurring tags may be cleared with an explicit None
    for key in OPTIONAL_FIELDS & fields.keys():
        if fields[key] is None:
            normalized[key] = None
    normalized.update(_validate_recurring_tags(fields))
    return normalized


def validate_period(year: Any, month: Optional[Any] = None) -> None:
    """Check a summary period. Month is 1-12, year is 1-9999."""
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError("year", "Must be an integer")
    if not 1 <= year <= 9999:
        raise ValidationError("year", "Must be between 1 and 9999")
    if month is None:
        return
    if isinstance(month, bool) or not isinstance(month, int):
        raise ValidationError("month", "Must be an integer")
    if not 1 <= month <= 12:
        raise ValidationError("month", "Must be between 1 and 12")
