"""
Data lineage tracking for audit trail.

This module provides a LineageTracker class recording old/new value pairs
for every change the cleaning stages make, so silver rows can be traced
back to their bronze values.
"""

from typing import Any

from silver_etl.core.models.audit_log import AuditLog
from silver_etl.observability.logger import get_logger
from silver_etl.warehouse.audit import insert_audit_logs_batch
from silver_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)


class LineageTracker:
    """
    Tracks field-level changes and creates audit log entries.

    Usage:
        tracker = LineageTracker(pool)
        tracker.track_measure_repair(
            record_ref="SO43697",
            field_name="unit_price",
            old_value=None,
            new_value=Decimal("3578.00"),
        )
        tracker.flush()  # Write pending entries to database
    """

    def __init__(
        self,
        pool: DatabaseConnectionPool | None = None,
        batch_size: int = 500,
        table: str = "audit_log",
        schema: str | None = None,
    ):
        """
        Initialize lineage tracker.

        Args:
            pool: Database connection pool (optional; without one entries stay in memory)
            batch_size: Number of entries to buffer before auto-flush
            table: Audit log table name
            schema: Optional schema qualifying the table
        """
        self.pool = pool
        self.batch_size = batch_size
        self.table = table
        self.schema = schema
        self._pending_logs: list[AuditLog] = []
        self._flushed_count = 0

    @property
    def pending(self) -> list[AuditLog]:
        return list(self._pending_logs)

    def track_transformation(
        self,
        record_ref: Any,
        entity: str,
        transformation_type: str,
        field_name: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
        rule_applied: str | None = None
    ) -> AuditLog:
        """
        Track a data transformation.

        Args:
            record_ref: Business identifier of the row being changed
            entity: "customer", "sales" or "product"
            transformation_type: Kind of change
            field_name: Field that changed
            old_value: Value before the change
            new_value: Value after the change
            rule_applied: Stage or rule that made the change

        Returns:
            AuditLog model instance
        """
        audit_log = AuditLog(
            record_ref=str(record_ref) if record_ref is not None else "unknown",
            entity=entity,
            transformation_type=transformation_type,
            field_name=field_name,
            old_value=str(old_value) if old_value is not None else None,
            new_value=str(new_value) if new_value is not None else None,
            rule_applied=rule_applied,
        )

        self._pending_logs.append(audit_log)

        if self.pool is not None and len(self._pending_logs) >= self.batch_size:
            self.flush()

        return audit_log

    def track_field_trimming(self, record_ref: Any, field_name: str, old_value: str, new_value: str) -> AuditLog:
        return self.track_transformation(
            record_ref=record_ref,
            entity="customer",
            transformation_type="field_trimming",
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            rule_applied="FieldNormalizer",
        )

    def track_code_mapping(self, record_ref: Any, field_name: str, old_value: Any, new_value: str) -> AuditLog:
        return self.track_transformation(
            record_ref=record_ref,
            entity="customer",
            transformation_type="code_mapping",
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            rule_applied="FieldNormalizer",
        )

    def track_date_nulling(self, record_ref: Any, field_name: str, old_value: Any) -> AuditLog:
        return self.track_transformation(
            record_ref=record_ref,
            entity="sales",
            transformation_type="date_nulling",
            field_name=field_name,
            old_value=old_value,
            new_value=None,
            rule_applied="DateCleaner",
        )

    def track_measure_repair(self, record_ref: Any, field_name: str, old_value: Any, new_value: Any) -> AuditLog:
        return self.track_transformation(
            record_ref=record_ref,
            entity="sales",
            transformation_type="measure_repair",
            field_name=field_name,
            old_value=old_value,
            new_value=new_value,
            rule_applied="MeasureRepairer",
        )

    def track_deduplication(self, record_ref: Any, duplicate_count: int) -> AuditLog:
        return self.track_transformation(
            record_ref=record_ref,
            entity="customer",
            transformation_type="deduplication",
            new_value=f"duplicates_removed={duplicate_count}",
            rule_applied="Deduplicator",
        )

    def flush(self) -> int:
        """
        Write all pending audit logs to the database.

        Returns:
            Number of audit log entries written (0 without a pool)
        """
        if self.pool is None:
            logger.debug(
                f"No database pool configured, keeping {len(self._pending_logs)} audit entries in memory"
            )
            return 0

        if not self._pending_logs:
            return 0

        try:
            count = insert_audit_logs_batch(
                self.pool, self._pending_logs, table=self.table, schema=self.schema
            )
        except Exception as e:
            logger.error(f"Failed to flush audit logs: {e}")
            raise

        logger.info(f"Flushed {count} audit log entries to database")
        self._flushed_count += count
        self._pending_logs.clear()
        return count

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Entries of a failed block are left pending, not persisted
        if exc_type is None and self._pending_logs and self.pool is not None:
            self.flush()
        return False
