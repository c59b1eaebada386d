"""Input validation package."""

from cashflow.validation.validator import (
    validate_amount,
    validate_category,
    validate_date,
    validate_description,
    validate_income_entry,
    validate_income_update,
    validate_period,
)

__all__ = [
    "validate_amount",
    "validate_category",
    "validate_date",
    "validate_description",
    "validate_income_entry",
    "validate_income_update",
    "validate_period",
]
