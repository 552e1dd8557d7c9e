"""
Deduplicator - keeps the most recent CRM record per customer identifier.

Rows are grouped by customer_id and each group is reduced to a single
winner: the row with the latest created_at. Equal timestamps resolve to
the row seen first in the input, and a null created_at ranks below any
real timestamp. Rows without an identifier are dropped and reported.
"""

from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from silver_etl.core.models import (
    CustomerRecord,
    KeyProfile,
    ReasonCode,
    StageResult,
    Violation,
)
from silver_etl.core.validators import RequiredFieldValidator, ValidationError
from silver_etl.observability.lineage import LineageTracker
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

STAGE = "deduplicator"


def recency_key(record: CustomerRecord) -> tuple[bool, datetime]:
    """Sort key ranking records by created_at, nulls lowest."""
    if record.created_at is None:
        return (False, datetime.min)
    return (True, record.created_at)


class Deduplicator:
    """
    Picks exactly one record per non-null customer_id.

    Usage:
        result = Deduplicator().deduplicate(raw_customers)
        result.rows        # one CustomerRecord per customer_id
        result.violations  # missing_key / duplicate_key findings
    """

    def __init__(self, key_field: str = "customer_id", lineage: LineageTracker | None = None):
        self.key_field = key_field
        self.lineage = lineage
        self._key_validator = RequiredFieldValidator(key_field)

    def _missing_key(self, record: CustomerRecord) -> Violation | None:
        payload = record.model_dump(mode="json")
        try:
            self._key_validator.validate(getattr(record, self.key_field), payload)
        except ValidationError as e:
            return e.to_violation(STAGE, record.customer_key, raw_payload=payload)
        return None

    def profile(self, records: Iterable[CustomerRecord]) -> KeyProfile:
        """
        Count null and duplicated identifiers without changing anything.

        Returns:
            KeyProfile with the null count and identifier -> row count for duplicates
        """
        records = list(records)
        keys = [getattr(r, self.key_field) for r in records]
        counts = Counter(k for k in keys if k is not None)
        return KeyProfile(
            total_rows=len(records),
            null_key_count=sum(1 for k in keys if k is None),
            duplicate_counts={k: n for k, n in counts.items() if n > 1},
        )

    def list_violations(self, records: Iterable[CustomerRecord]) -> list[Violation]:
        """
        List rows with a null identifier and identifiers occurring more than once.

        Read-only: one missing_key violation per null-key row and one
        duplicate_key violation per duplicated identifier.
        """
        records = list(records)
        violations = [v for v in map(self._missing_key, records) if v is not None]

        profile = self.profile(records)
        for key, count in profile.duplicate_counts.items():
            violations.append(
                Violation(
                    stage=STAGE,
                    reason=ReasonCode.DUPLICATE_KEY,
                    record_ref=str(key),
                    field_name=self.key_field,
                    value=count,
                    message=f"{self.key_field} {key} appears {count} times",
                )
            )
        return violations

    def deduplicate(self, records: Iterable[CustomerRecord]) -> StageResult[CustomerRecord]:
        """
        Reduce each identifier group to its most recent record.

        Output order follows the first appearance of each identifier.

        Returns:
            StageResult with the winners and one violation per dropped row
        """
        winners: dict[int, CustomerRecord] = {}
        group_sizes: Counter = Counter()
        violations: list[Violation] = []
        losers: list[CustomerRecord] = []

        for record in records:
            missing = self._missing_key(record)
            if missing is not None:
                violations.append(missing)
                continue

            key = getattr(record, self.key_field)
            group_sizes[key] += 1
            current = winners.get(key)
            if current is None:
                winners[key] = record
            elif recency_key(record) > recency_key(current):
                losers.append(current)
                winners[key] = record
            else:
                losers.append(record)

        for loser in losers:
            key = getattr(loser, self.key_field)
            violations.append(
                Violation(
                    stage=STAGE,
                    reason=ReasonCode.DUPLICATE_KEY,
                    record_ref=str(key),
                    field_name="created_at",
                    value=loser.created_at,
                    message=f"Superseded by record created at {winners[key].created_at}",
                    raw_payload=loser.model_dump(mode="json"),
                )
            )

        if self.lineage is not None:
            for key, size in group_sizes.items():
                if size > 1:
                    self.lineage.track_deduplication(key, size - 1)

        logger.info(
            f"Deduplicated customers: {len(winners)} kept, {len(violations)} dropped",
            extra={"stage": STAGE, "kept": len(winners), "dropped": len(violations)},
        )
        return StageResult(stage=STAGE, rows=list(winners.values()), violations=violations)
