"""
Unit tests for row validators.

Includes property-based testing with hypothesis for the date validator.
"""

from datetime import date
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

from silver_etl.core.models import ReasonCode
from silver_etl.core.validators import (
    IntegerDateValidator,
    RangeValidator,
    RequiredFieldValidator,
    SalesConsistencyValidator,
    ValidationError,
)

pytestmark = pytest.mark.unit


class TestRequiredFieldValidator:
    """Tests for RequiredFieldValidator"""

    def test_present_field_passes(self):
        validator = RequiredFieldValidator("customer_id")
        validator.validate(11000, {"customer_id": 11000})  # Should not raise

    def test_null_field_reports_missing_key(self):
        validator = RequiredFieldValidator("customer_id")

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(None, {"customer_id": None})

        assert exc_info.value.reason == ReasonCode.MISSING_KEY
        assert exc_info.value.field_name == "customer_id"

    def test_missing_field_raises_error(self):
        validator = RequiredFieldValidator("customer_id")

        with pytest.raises(ValidationError):
            validator.validate(None, {"customer_key": "AW00011000"})

    def test_blank_string_raises_error(self):
        validator = RequiredFieldValidator("customer_key")

        with pytest.raises(ValidationError):
            validator.validate("   ", {"customer_key": "   "})

    def test_blank_string_allowed_when_configured(self):
        validator = RequiredFieldValidator("customer_key", {"allow_empty_string": True})
        validator.validate("", {"customer_key": ""})  # Should not raise


class TestRangeValidator:
    """Tests for RangeValidator"""

    def test_requires_a_bound(self):
        with pytest.raises(ValueError):
            RangeValidator("quantity", {})

    def test_exclusive_minimum(self):
        validator = RangeValidator("quantity", {"min_exclusive": 0})

        assert validator.is_valid(1, {})
        assert not validator.is_valid(0, {})
        assert not validator.is_valid(-3, {})

    def test_accepts_decimal(self):
        validator = RangeValidator("unit_price", {"min_exclusive": 0})
        assert validator.is_valid(Decimal("0.01"), {})

    def test_rejects_bool(self):
        validator = RangeValidator("quantity", {"min": 0})
        assert not validator.is_valid(True, {})

    def test_null_skipped_unless_required(self):
        assert RangeValidator("quantity", {"min": 0}).is_valid(None, {})
        assert not RangeValidator("quantity", {"min": 0, "required": True}).is_valid(None, {})

    def test_configured_reason_code(self):
        validator = RangeValidator(
            "quantity", {"min_exclusive": 0, "reason": ReasonCode.UNREPAIRABLE_MEASURE}
        )

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(0, {})

        assert exc_info.value.reason == ReasonCode.UNREPAIRABLE_MEASURE


class TestIntegerDateValidator:
    """Tests for IntegerDateValidator"""

    @pytest.fixture
    def validator(self):
        return IntegerDateValidator("order_date_raw")

    def test_leap_day_parses(self, validator):
        assert validator.parse(20240229) == date(2024, 2, 29)

    def test_lower_bound_inclusive(self, validator):
        assert validator.parse(19000101) == date(1900, 1, 1)

    def test_upper_bound_inclusive(self, validator):
        assert validator.parse(20250101) == date(2025, 1, 1)

    @pytest.mark.parametrize(
        "value",
        [0, -20100101, 5489, 202501011, 18991231, 20250102, 20101329, 20230229, None, "20240101"],
    )
    def test_invalid_values_raise_malformed_date(self, validator, value):
        with pytest.raises(ValidationError) as exc_info:
            validator.parse(value)

        assert exc_info.value.reason == ReasonCode.MALFORMED_DATE

    def test_custom_bounds(self):
        validator = IntegerDateValidator("d", {"min": 20000101, "max": 20001231})

        assert validator.is_valid(20000615, {})
        assert not validator.is_valid(19991231, {})

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValueError):
            IntegerDateValidator("d", {"min": 20250101, "max": 19000101})

    @given(st.dates(min_value=date(1900, 1, 1), max_value=date(2025, 1, 1)))
    def test_property_every_in_range_date_round_trips(self, day):
        """Property test: every calendar day inside the bounds parses back to itself"""
        validator = IntegerDateValidator("order_date_raw")
        assert validator.parse(int(day.strftime("%Y%m%d"))) == day


class TestSalesConsistencyValidator:
    """Tests for SalesConsistencyValidator"""

    def test_consistent_row_passes(self):
        validator = SalesConsistencyValidator()
        record = {"sales_amount": Decimal("30"), "quantity": 3, "unit_price": Decimal("10")}
        validator.validate(record["sales_amount"], record)  # Should not raise

    def test_negative_price_uses_absolute_value(self):
        validator = SalesConsistencyValidator()
        record = {"sales_amount": Decimal("30"), "quantity": 3, "unit_price": Decimal("-10")}
        assert validator.is_valid(record["sales_amount"], record)

    def test_inconsistent_row_fails(self):
        validator = SalesConsistencyValidator()
        record = {"sales_amount": Decimal("31"), "quantity": 3, "unit_price": Decimal("10")}

        with pytest.raises(ValidationError) as exc_info:
            validator.validate(record["sales_amount"], record)

        assert exc_info.value.reason == ReasonCode.INCONSISTENT_MEASURE

    def test_null_operand_skipped(self):
        validator = SalesConsistencyValidator()
        record = {"sales_amount": None, "quantity": 3, "unit_price": Decimal("10")}
        assert validator.is_valid(None, record)


class TestValidationErrorToViolation:
    """Failures convert into report entries"""

    def test_to_violation(self):
        validator = RequiredFieldValidator("customer_id")
        with pytest.raises(ValidationError) as exc_info:
            validator.validate(None, {"customer_id": None, "customer_key": "SF566"})

        violation = exc_info.value.to_violation("deduplicator", "SF566", raw_payload={"customer_key": "SF566"})

        assert violation.stage == "deduplicator"
        assert violation.reason == ReasonCode.MISSING_KEY
        assert violation.field_name == "customer_id"
        assert violation.record_ref == "SF566"
        assert violation.value is None
        assert violation.raw_payload == {"customer_key": "SF566"}
