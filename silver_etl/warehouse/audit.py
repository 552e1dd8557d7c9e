"""
Audit log persistence for data lineage tracking.

Inserts the old/new value pairs recorded by the LineageTracker.
"""

from silver_etl.core.models.audit_log import AuditLog
from silver_etl.observability.logger import get_logger
from silver_etl.utils.validation import qualified_table, sanitize_sql_identifier

logger = get_logger(__name__)

_AUDIT_COLUMNS = (
    "record_ref",
    "entity",
    "transformation_type",
    "field_name",
    "old_value",
    "new_value",
    "rule_applied",
    "created_at",
)


def build_audit_insert(table: str = "audit_log", schema: str | None = None) -> str:
    """Build the INSERT statement for the audit log table."""
    if schema:
        table = qualified_table(schema, table)
    else:
        table = sanitize_sql_identifier(table, "audit table")
    placeholders = ", ".join(["%s"] * len(_AUDIT_COLUMNS))
    return f"INSERT INTO {table} ({', '.join(_AUDIT_COLUMNS)}) VALUES ({placeholders})"


def insert_audit_logs_batch(
    pool,
    audit_logs: list[AuditLog],
    table: str = "audit_log",
    schema: str | None = None,
) -> int:
    """
    Insert multiple audit log entries in a single transaction.

    Args:
        pool: Database connection pool
        audit_logs: AuditLog model instances
        table: Target table name
        schema: Optional schema qualifying the table

    Returns:
        Number of entries inserted

    Raises:
        psycopg.DatabaseError: If the insert fails
    """
    if not audit_logs:
        return 0

    params = [
        (
            log.record_ref,
            log.entity,
            log.transformation_type,
            log.field_name,
            log.old_value,
            log.new_value,
            log.rule_applied,
            log.created_at,
        )
        for log in audit_logs
    ]

    count = pool.execute_batch(build_audit_insert(table, schema), params)
    logger.debug(f"Inserted {count} audit log entries into {table}")
    return count
