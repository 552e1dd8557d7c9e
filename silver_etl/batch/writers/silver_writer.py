"""
Silver sink writer.

Each silver table is fully refreshed per run: truncated and re-filled in
one transaction, so a rerun over the same bronze extract yields the same
tables.
"""

from collections.abc import Sequence

from pydantic import BaseModel

from silver_etl.batch.bundle import SilverBatch
from silver_etl.core.config import SinkSettings
from silver_etl.observability.logger import get_logger
from silver_etl.utils.validation import qualified_table, sanitize_sql_identifier
from silver_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)

CUSTOMER_COLUMNS = (
    "customer_id",
    "customer_key",
    "first_name",
    "last_name",
    "marital_status_code",
    "gender_code",
    "created_at",
)

SALES_COLUMNS = (
    "order_number",
    "product_key",
    "customer_id",
    "order_date",
    "ship_date",
    "due_date",
    "quantity",
    "old_sales_amount",
    "old_unit_price",
    "sales_amount",
    "unit_price",
)

PRODUCT_COLUMNS = (
    "product_id",
    "product_key",
    "name",
    "category_id",
    "category",
    "subcategory",
    "maintenance",
    "cost",
    "product_line",
    "start_date",
)

DIMENSION_COLUMNS = (
    "customer_key",
    "customer_id",
    "customer_number",
    "first_name",
    "last_name",
    "country",
    "marital_status",
    "gender",
    "birthdate",
    "create_date",
)


def build_insert(table: str, columns: Sequence[str]) -> str:
    """Build a parameterized INSERT for an already-qualified table name."""
    names = ", ".join(sanitize_sql_identifier(c, "column") for c in columns)
    placeholders = ", ".join(["%s"] * len(columns))
    return f"INSERT INTO {table} ({names}) VALUES ({placeholders})"


class SilverWriter:
    """
    Writes the silver tables of a SilverBatch.

    Usage:
        writer = SilverWriter(pool, settings.sink)
        counts = writer.write_batch(batch)  # {"customers": 18484, ...}
    """

    def __init__(self, pool: DatabaseConnectionPool, sink: SinkSettings | None = None):
        """
        Initialize silver writer.

        Args:
            pool: Database connection pool
            sink: Target schema and table names

        Raises:
            ValidationError: If a configured schema or table name is not a safe identifier
        """
        self.pool = pool
        self.sink = sink or SinkSettings()
        self.tables = {
            entity: qualified_table(self.sink.schema_name, table)
            for entity, table in self.sink.tables.items()
        }

    def _refill(self, cur, entity: str, columns: Sequence[str], rows: Sequence[BaseModel]) -> int:
        table = self.tables[entity]
        params = [tuple(getattr(row, column) for column in columns) for row in rows]
        cur.execute(f"TRUNCATE TABLE {table}")
        if params:
            cur.executemany(build_insert(table, columns), params)
        logger.info(f"Refilled {table} with {len(params)} rows", extra={"table": table, "rows": len(params)})
        return len(params)

    def replace_table(self, entity: str, columns: Sequence[str], rows: Sequence[BaseModel]) -> int:
        """
        Truncate an entity's table and insert the rows in one transaction.

        Returns:
            Number of rows inserted
        """
        with self.pool.get_connection() as conn:
            with conn.cursor() as cur:
                count = self._refill(cur, entity, columns, rows)
            conn.commit()
        return count

    def write_customers(self, rows) -> int:
        return self.replace_table("customers", CUSTOMER_COLUMNS, rows)

    def write_sales(self, rows) -> int:
        return self.replace_table("sales", SALES_COLUMNS, rows)

    def write_products(self, rows) -> int:
        return self.replace_table("products", PRODUCT_COLUMNS, rows)

    def write_dimension(self, rows) -> int:
        return self.replace_table("dimension", DIMENSION_COLUMNS, rows)

    def write_batch(self, batch: SilverBatch) -> dict[str, int]:
        """
        Refresh every silver table of a batch in a single transaction.

        A failure on any table rolls back all of them, so the silver tables
        never mix rows of two runs.

        Returns:
            Rows written per entity
        """
        tables = (
            ("customers", CUSTOMER_COLUMNS, batch.customers),
            ("sales", SALES_COLUMNS, batch.sales),
            ("products", PRODUCT_COLUMNS, batch.products),
            ("dimension", DIMENSION_COLUMNS, batch.dimension),
        )
        with self.pool.get_connection() as conn:
            with conn.cursor() as cur:
                counts = {entity: self._refill(cur, entity, columns, rows) for entity, columns, rows in tables}
            conn.commit()
        return counts
