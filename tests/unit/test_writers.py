"""
Unit tests for the silver and exceptions writers.

The connection pool is a MagicMock; statements and parameters are asserted.
"""

import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from silver_etl.batch.bundle import SilverBatch
from silver_etl.batch.writers import ExceptionsWriter, SilverWriter
from silver_etl.core.config import SinkSettings
from silver_etl.core.models import CustomerRecord, DimensionRow, ReasonCode, RepairedSalesRecord, Violation
from silver_etl.utils.validation import ValidationError

pytestmark = pytest.mark.unit


@pytest.fixture
def pool():
    pool = MagicMock()
    pool.execute_batch.side_effect = lambda command, params: len(params)
    return pool


def cursor_of(pool):
    conn = pool.get_connection.return_value.__enter__.return_value
    return conn, conn.cursor.return_value.__enter__.return_value


class TestSilverWriter:
    """Tests for full-refresh table writes"""

    def test_replace_dimension(self, pool):
        rows = [DimensionRow(customer_key=1, customer_id=11000, customer_number="AW00011000", gender="Male")]

        count = SilverWriter(pool).write_dimension(rows)

        conn, cur = cursor_of(pool)
        assert count == 1
        cur.execute.assert_called_once_with("TRUNCATE TABLE silver.dim_customers")
        command, params = cur.executemany.call_args.args
        assert command.startswith("INSERT INTO silver.dim_customers (customer_key, customer_id,")
        assert params[0][:3] == (1, 11000, "AW00011000")
        conn.commit.assert_called_once()

    def test_empty_table_still_truncated(self, pool):
        assert SilverWriter(pool).write_sales([]) == 0

        _, cur = cursor_of(pool)
        cur.execute.assert_called_once_with("TRUNCATE TABLE silver.crm_sales_details")
        cur.executemany.assert_not_called()

    def test_sales_keep_old_and_new_measures(self, pool):
        row = RepairedSalesRecord(
            order_number="SO1", quantity=3, old_sales_amount=Decimal("30"), old_unit_price=None,
            sales_amount=Decimal("30"), unit_price=Decimal("10.00"), repairs=["unit_price"],
        )

        SilverWriter(pool).write_sales([row])

        _, cur = cursor_of(pool)
        params = cur.executemany.call_args.args[1][0]
        assert params[-4:] == (Decimal("30"), None, Decimal("30"), Decimal("10.00"))

    def test_write_batch(self, pool):
        counts = SilverWriter(pool).write_batch(SilverBatch())
        assert counts == {"customers": 0, "sales": 0, "products": 0, "dimension": 0}

    def test_write_batch_commits_once_after_all_tables(self, pool):
        conn, cur = cursor_of(pool)
        statements = []
        cur.execute.side_effect = statements.append
        conn.commit.side_effect = lambda: statements.append("COMMIT")

        SilverWriter(pool).write_batch(SilverBatch())

        pool.get_connection.assert_called_once()
        assert statements == [
            "TRUNCATE TABLE silver.crm_cust_info",
            "TRUNCATE TABLE silver.crm_sales_details",
            "TRUNCATE TABLE silver.crm_prd_info",
            "TRUNCATE TABLE silver.dim_customers",
            "COMMIT",
        ]

    def test_write_batch_failure_commits_nothing(self, pool):
        conn, cur = cursor_of(pool)
        cur.execute.side_effect = [None, RuntimeError("disk full")]
        batch = SilverBatch(
            customers=[CustomerRecord(customer_id=11000, customer_key="AW00011000")],
        )

        with pytest.raises(RuntimeError, match="disk full"):
            SilverWriter(pool).write_batch(batch)

        cur.executemany.assert_called_once()
        conn.commit.assert_not_called()

    def test_configured_names(self, pool):
        sink = SinkSettings(schema="staging", tables={**SinkSettings().tables, "dimension": "dim_customer_v2"})
        writer = SilverWriter(pool, sink)

        assert writer.tables["dimension"] == "staging.dim_customer_v2"

    def test_unsafe_table_name_rejected(self, pool):
        sink = SinkSettings(tables={"customers": "customers; DROP TABLE x"})

        with pytest.raises(ValidationError):
            SilverWriter(pool, sink)


class TestExceptionsWriter:
    """Tests for the exceptions sink"""

    def test_write(self, pool):
        violations = [
            Violation(
                stage="business_rule_repairer",
                reason=ReasonCode.UNREPAIRABLE_MEASURE,
                record_ref="SO43700",
                field_name="quantity",
                value=0,
                message="Quantity is null or not positive",
                raw_payload={"order_number": "SO43700", "quantity": 0},
            )
        ]

        assert ExceptionsWriter(pool).write(violations, run_id="run-1") == 1

        command, params = pool.execute_batch.call_args.args
        assert command.startswith("INSERT INTO silver.dq_exceptions (run_id, stage, reason,")
        row = params[0]
        assert row[:6] == ("run-1", "business_rule_repairer", "unrepairable_measure", "SO43700", "quantity", "0")
        assert json.loads(row[7]) == {"order_number": "SO43700", "quantity": 0}

    def test_generates_run_id(self, pool):
        ExceptionsWriter(pool).write([Violation(stage="s", reason=ReasonCode.MISSING_KEY, message="m")])

        run_id = pool.execute_batch.call_args.args[1][0][0]
        assert len(run_id) == 36

    def test_nothing_to_write(self, pool):
        assert ExceptionsWriter(pool).write([]) == 0
        pool.execute_batch.assert_not_called()
