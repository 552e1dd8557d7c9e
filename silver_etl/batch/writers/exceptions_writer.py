"""
Exceptions writer for data-quality findings.

Appends the violations of a run to the exceptions table, tagged with a run
identifier; nothing is ever deleted from it.
"""

import json
import uuid
from collections.abc import Sequence

from silver_etl.core.config import SinkSettings
from silver_etl.core.models import Violation
from silver_etl.observability.logger import get_logger
from silver_etl.utils.validation import qualified_table
from silver_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)

EXCEPTION_COLUMNS = (
    "run_id",
    "stage",
    "reason",
    "record_ref",
    "field_name",
    "value",
    "message",
    "raw_payload",
    "detected_at",
)


class ExceptionsWriter:
    """
    Writes violations to the data-quality exceptions table in bulk.
    """

    def __init__(self, pool: DatabaseConnectionPool, sink: SinkSettings | None = None):
        self.pool = pool
        sink = sink or SinkSettings()
        self.table = qualified_table(sink.schema_name, sink.tables["exceptions"])

    def write(self, violations: Sequence[Violation], run_id: str | None = None) -> int:
        """
        Insert violations.

        Args:
            violations: Findings to persist
            run_id: Identifier grouping the findings of one run (generated when omitted)

        Returns:
            Number of violations inserted
        """
        if not violations:
            return 0

        run_id = run_id or str(uuid.uuid4())
        placeholders = ", ".join(["%s"] * len(EXCEPTION_COLUMNS))
        command = f"INSERT INTO {self.table} ({', '.join(EXCEPTION_COLUMNS)}) VALUES ({placeholders})"
        params = [
            (
                run_id,
                v.stage,
                v.reason.value,
                v.record_ref,
                v.field_name,
                v.value,
                v.message,
                json.dumps(v.raw_payload, default=str),
                v.detected_at,
            )
            for v in violations
        ]

        count = self.pool.execute_batch(command, params)
        logger.info(
            f"Wrote {count} exceptions to {self.table}",
            extra={"table": self.table, "rows": count, "run_id": run_id},
        )
        return count
