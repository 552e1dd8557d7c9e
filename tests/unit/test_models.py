"""
Unit tests for Pydantic models.

Tests model coercion from CSV text, immutability and constraints.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from silver_etl.core.models import (
    CustomerRecord,
    DimensionRow,
    ErpCustomerAttributes,
    ProductRecord,
    ReasonCode,
    RepairedSalesRecord,
    SalesRecord,
    StageResult,
    Violation,
)

pytestmark = pytest.mark.unit


class TestCustomerRecord:
    """Tests for CustomerRecord model"""

    def test_coerces_csv_text(self):
        record = CustomerRecord.model_validate(
            {
                "customer_id": "11000",
                "customer_key": "AW00011000",
                "first_name": " Jon",
                "created_at": "2025-10-06",
            }
        )

        assert record.customer_id == 11000
        assert record.created_at == datetime(2025, 10, 6)
        assert record.first_name == " Jon"  # untouched until normalization

    def test_blank_id_becomes_null(self):
        record = CustomerRecord.model_validate({"customer_id": "", "created_at": " "})

        assert record.customer_id is None
        assert record.created_at is None

    def test_offset_timestamp_stored_as_naive_utc(self):
        record = CustomerRecord.model_validate({"customer_id": "1", "created_at": "2025-10-07T02:00:00+02:00"})

        assert record.created_at == datetime(2025, 10, 7, 0, 0)
        assert record.created_at.tzinfo is None

    def test_non_numeric_id_rejected(self):
        with pytest.raises(ValidationError):
            CustomerRecord.model_validate({"customer_id": "abc"})

    def test_frozen(self):
        record = CustomerRecord(customer_id=1)

        with pytest.raises(ValidationError):
            record.customer_id = 2


class TestSalesRecord:
    """Tests for SalesRecord and RepairedSalesRecord"""

    def test_coerces_csv_text(self):
        record = SalesRecord.model_validate(
            {"order_date_raw": "20101229", "sales_amount": "3578", "quantity": "1", "unit_price": ""}
        )

        assert record.order_date_raw == 20101229
        assert record.sales_amount == Decimal("3578")
        assert record.unit_price is None

    def test_repaired_requires_positive_measures(self):
        with pytest.raises(ValidationError):
            RepairedSalesRecord(quantity=0, sales_amount=Decimal("1"), unit_price=Decimal("1"))

        with pytest.raises(ValidationError):
            RepairedSalesRecord(quantity=1, sales_amount=Decimal("1"), unit_price=Decimal("-1"))

    def test_was_repaired(self):
        clean = RepairedSalesRecord(quantity=1, sales_amount=Decimal("5"), unit_price=Decimal("5"))
        fixed = clean.model_copy(update={"repairs": ["unit_price"]})

        assert not clean.was_repaired
        assert fixed.was_repaired


class TestOtherModels:
    """Tests for ERP, product and dimension models"""

    def test_erp_blank_birthdate(self):
        attrs = ErpCustomerAttributes.model_validate({"source_customer_key": "NASAW00011000", "birthdate": ""})
        assert attrs.birthdate is None

    def test_erp_requires_key(self):
        with pytest.raises(ValidationError):
            ErpCustomerAttributes.model_validate({"gender": "Male"})

    def test_product_blank_end_date_is_current(self):
        product = ProductRecord.model_validate({"product_id": "210", "start_date": "2003-07-01", "end_date": ""})

        assert product.start_date == date(2003, 7, 1)
        assert product.end_date is None

    def test_dimension_defaults(self):
        row = DimensionRow(customer_id=11000)

        assert row.customer_key is None
        assert row.country == "n/a"
        assert row.gender == "n/a"
        assert row.marital_status == "n/a"

    def test_dimension_key_must_be_positive(self):
        with pytest.raises(ValidationError):
            DimensionRow(customer_key=0, customer_id=11000)


class TestViolation:
    """Tests for Violation and StageResult"""

    def test_value_stringified(self):
        violation = Violation(
            stage="date_validator",
            reason=ReasonCode.MALFORMED_DATE,
            value=20101329,
            message="not a calendar date",
        )

        assert violation.value == "20101329"
        assert violation.reason.value == "malformed_date"

    def test_reason_from_text(self):
        violation = Violation(stage="x", reason="missing_key", message="m")
        assert violation.reason == ReasonCode.MISSING_KEY

    def test_violations_for(self):
        result = StageResult(
            stage="deduplicator",
            rows=[],
            violations=[
                Violation(stage="deduplicator", reason=ReasonCode.MISSING_KEY, message="a"),
                Violation(stage="deduplicator", reason=ReasonCode.DUPLICATE_KEY, message="b"),
            ],
        )

        assert len(result.violations_for(ReasonCode.MISSING_KEY)) == 1
        assert result.violations_for(ReasonCode.MALFORMED_DATE) == []
