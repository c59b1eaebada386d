"""Tests for field validators."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from cashflow.errors import ValidationError
from cashflow.models import IncomeCategory
from cashflow.validation import (
    validate_amount,
    validate_category,
    validate_date,
    validate_description,
    validate_income_entry,
    validate_income_update,
    validate_period,
)


class TestValidateAmount:
    """Tests for validate_amount."""

    @pytest.mark.parametrize("value, expected", [
        (500, Decimal("500.00")),
        (0.1, Decimal("0.10")),
        (19.99, Decimal("19.99")),
        (Decimal("1.5"), Decimal("1.50")),
        (Decimal("2.500"), Decimal("2.50")),
    ])
    def test_valid_amounts(self, value, expected):
        """Ints, floats and Decimals with up to two places pass."""
        assert validate_amount(value) == expected

    @pytest.mark.parametrize("value", [0, -1, -0.01, Decimal("0.00")])
    def test_rejects_non_positive(self, value):
        """Zero and negatives are rejected."""
        with pytest.raises(ValidationError, match="Must be greater than 0"):
            validate_amount(value)

    @pytest.mark.parametrize("value", [1.234, Decimal("0.001"), 0.005])
    def test_rejects_more_than_two_decimals(self, value):
        """Three decimal places are rejected, not rounded."""
        with pytest.raises(ValidationError, match="Maximum 2 decimal places"):
            validate_amount(value)

    def test_rejects_nan(self):
        """NaN is rejected."""
        with pytest.raises(ValidationError, match="valid number"):
            validate_amount(float("nan"))

    def test_rejects_infinity(self):
        """Infinity is rejected."""
        with pytest.raises(ValidationError, match="finite"):
            validate_amount(float("inf"))
        with pytest.raises(ValidationError, match="finite"):
            validate_amount(Decimal("Infinity"))

    @pytest.mark.parametrize("value", ["100", None, True, [1]])
    def test_rejects_non_numbers(self, value):
        """Strings, bools and None are rejected."""
        with pytest.raises(ValidationError, match="valid number"):
            validate_amount(value)

    def test_error_carries_field_name(self):
        """The error names the failing field."""
        with pytest.raises(ValidationError) as exc_info:
            validate_amount(-5)
        assert exc_info.value.field == "amount"
        assert exc_info.value.reason == "Must be greater than 0"


class TestValidateDate:
    """Tests for validate_date."""

    def test_valid_date(self):
        """YYYY-MM-DD strings parse."""
        assert validate_date("2024-02-29") == date(2024, 2, 29)

    def test_future_dates_allowed(self):
        """Future dates are allowed."""
        assert validate_date("2999-12-31") == date(2999, 12, 31)

    def test_accepts_date_instance(self):
        """date objects pass through."""
        assert validate_date(date(2024, 1, 1)) == date(2024, 1, 1)

    @pytest.mark.parametrize("value", ["2024/01/01", "24-01-01", "2024-1-1", "2024-01-01T00:00"])
    def test_rejects_bad_format(self, value):
        """Other date formats are rejected."""
        with pytest.raises(ValidationError, match="YYYY-MM-DD"):
            validate_date(value)

    @pytest.mark.parametrize("value", ["2023-02-29", "2024-13-01", "2024-04-31"])
    def test_rejects_impossible_dates(self, value):
        """Well-formed but impossible dates are rejected."""
        with pytest.raises(ValidationError, match="valid date"):
            validate_date(value)

    def test_rejects_non_strings(self):
        """Non-string dates are rejected."""
        with pytest.raises(ValidationError, match="Must be a string"):
            validate_date(20240101)
        with pytest.raises(ValidationError, match="Must be a string"):
            validate_date(datetime(2024, 1, 1))


class TestValidateDescriptionAndCategory:
    """Tests for validate_description and validate_category."""

    def test_description_trimmed(self):
        """Descriptions are trimmed."""
        assert validate_description("  Paycheck ") == "Paycheck"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_description(self, value):
        """Blank descriptions are rejected."""
        with pytest.raises(ValidationError, match="Cannot be empty"):
            validate_description(value)

    def test_description_length_limit(self):
        """Descriptions are limited to 200 characters."""
        assert validate_description("x" * 200) == "x" * 200
        with pytest.raises(ValidationError, match="Maximum 200"):
            validate_description("x" * 201)

    def test_category(self):
        """Known categories pass."""
        assert validate_category("Bonus") is IncomeCategory.BONUS
        assert validate_category(IncomeCategory.GIFT) is IncomeCategory.GIFT

    def test_unknown_category(self):
        """Unknown categories are rejected."""
        with pytest.raises(ValidationError, match="Must be one of: Salary"):
            validate_category("Lottery")


class TestValidateEntryDrafts:
    """Tests for whole-draft and partial-update validation."""

    def test_complete_draft(self):
        """A full draft normalizes every field."""
        fields = validate_income_entry({
            "amount": 500,
            "date": "2024-01-05",
            "description": "Paycheck",
            "category": "Salary",
            "isRecurring": True,
        })
        assert fields == {
            "amount": Decimal("500.00"),
            "date": date(2024, 1, 5),
            "description": "Paycheck",
            "category": IncomeCategory.SALARY,
            "is_recurring": True,
        }

    def test_missing_field(self):
        """A missing required field is reported."""
        with pytest.raises(ValidationError) as exc_info:
            validate_income_entry({"amount": 1, "date": "2024-01-01", "category": "Gift"})
        assert exc_info.value.field == "description"

    @pytest.mark.parametrize("field", ["id", "timestamp", "balance_after", "balanceAfter"])
    def test_draft_cannot_carry_derived_fields(self, field):
        """Drafts cannot supply id, timestamp or balance_after."""
        draft = {
            "amount": 1,
            "date": "2024-01-01",
            "description": "x",
            "category": "Gift",
            field: "anything",
        }
        with pytest.raises(ValidationError, match="assigned by the ledger"):
            validate_income_entry(draft)

    def test_unknown_field(self):
        """Unknown keys are rejected."""
        with pytest.raises(ValidationError, match="Unknown field"):
            validate_income_entry({
                "amount": 1,
                "date": "2024-01-01",
                "description": "x",
                "category": "Gift",
                "currency": "EUR",
            })

    def test_update_validates_only_supplied_fields(self):
        """Updates validate only what they carry."""
        assert validate_income_update({"amount": 50}) == {"amount": Decimal("50.00")}

    def test_update_rejects_bad_value(self):
        """A bad value in an update is rejected."""
        with pytest.raises(ValidationError, match="Must be greater than 0"):
            validate_income_update({"amount": -50, "description": "ok"})

    def test_update_cannot_touch_derived_fields(self):
        """Updates cannot change derived fields."""
        with pytest.raises(ValidationError, match="Cannot be updated"):
            validate_income_update({"timestamp": 1})

    def test_empty_update(self):
        """An empty update is rejected."""
        with pytest.raises(ValidationError, match="At least one field"):
            validate_income_update({})

    def test_update_can_clear_recurring_tags(self):
        """Recurring tags can be cleared with None."""
        assert validate_income_update({"recurring_id": None}) == {"recurring_id": None}


class TestValidatePeriod:
    """Tests for validate_period."""

    def test_valid(self):
        """Valid years and months pass."""
        validate_period(2024, 12)
        validate_period(2024)

    @pytest.mark.parametrize("year, month, field", [
        (2024, 0, "month"),
        (2024, 13, "month"),
        (0, 1, "year"),
        ("2024", None, "year"),
        (2024, True, "month"),
    ])
    def test_invalid(self, year, month, field):
        """Out-of-range or non-integer periods are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_period(year, month)
        assert exc_info.value.field == field
