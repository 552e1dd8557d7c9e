"""
Field Normalizer - trims names and maps coded fields to canonical labels.

Every function here is pure and per-field. Canonical labels map to
themselves, so normalizing twice gives the same result as normalizing once.
"""

from collections import Counter
from collections.abc import Iterable

from silver_etl.core.models import CustomerRecord, ReasonCode, StageResult, Violation
from silver_etl.observability.lineage import LineageTracker
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

STAGE = "field_normalizer"
NOT_AVAILABLE = "n/a"

GENDER_CODES = {"F": "Female", "M": "Male"}
MARITAL_STATUS_CODES = {"S": "Single", "M": "Married"}

TRIMMED_FIELDS = ("first_name", "last_name")


def _map_code(value: str | None, codes: dict[str, str]) -> str:
    if value is None:
        return NOT_AVAILABLE
    key = value.strip().upper()
    # Canonical labels in any casing are fixed points
    labels = {label.upper(): label for label in codes.values()}
    return codes.get(key) or labels.get(key, NOT_AVAILABLE)


def normalize_gender(value: str | None) -> str:
    """Map a raw gender code to "Female", "Male" or "n/a"."""
    return _map_code(value, GENDER_CODES)


def normalize_marital_status(value: str | None) -> str:
    """Map a raw marital status code to "Single", "Married" or "n/a"."""
    return _map_code(value, MARITAL_STATUS_CODES)


def trim_text(value: str | None) -> str | None:
    """Strip leading and trailing whitespace, leaving inner whitespace alone."""
    if value is None:
        return None
    return value.strip()


class FieldNormalizer:
    """
    Produces the standardized projection of each customer record.
    """

    def __init__(self, lineage: LineageTracker | None = None):
        self.lineage = lineage

    def normalize(self, record: CustomerRecord) -> CustomerRecord:
        """
        Return a normalized copy of the record.

        Names are trimmed; gender and marital status codes become canonical labels.
        """
        updates = {
            "first_name": trim_text(record.first_name),
            "last_name": trim_text(record.last_name),
            "gender_code": normalize_gender(record.gender_code),
            "marital_status_code": normalize_marital_status(record.marital_status_code),
        }

        if self.lineage is not None:
            ref = record.customer_id
            for field in TRIMMED_FIELDS:
                if getattr(record, field) != updates[field]:
                    self.lineage.track_field_trimming(ref, field, getattr(record, field), updates[field])
            for field in ("gender_code", "marital_status_code"):
                if getattr(record, field) != updates[field]:
                    self.lineage.track_code_mapping(ref, field, getattr(record, field), updates[field])

        return record.model_copy(update=updates)

    def normalize_all(self, records: Iterable[CustomerRecord]) -> StageResult[CustomerRecord]:
        rows = [self.normalize(record) for record in records]
        logger.info(f"Normalized {len(rows)} customer records", extra={"stage": STAGE, "rows": len(rows)})
        return StageResult(stage=STAGE, rows=rows)

    def list_violations(self, records: Iterable[CustomerRecord]) -> list[Violation]:
        """
        List names and gender codes carrying leading or trailing whitespace.

        Read-only; one untrimmed_text violation per offending field.
        """
        violations = []
        for record in records:
            for field in (*TRIMMED_FIELDS, "gender_code"):
                value = getattr(record, field)
                if value is not None and value != value.strip():
                    violations.append(
                        Violation(
                            stage=STAGE,
                            reason=ReasonCode.UNTRIMMED_TEXT,
                            record_ref=str(record.customer_id) if record.customer_id is not None else None,
                            field_name=field,
                            value=repr(value),
                            message=f"{field} has leading or trailing whitespace",
                            raw_payload=record.model_dump(mode="json"),
                        )
                    )
        return violations

    @staticmethod
    def distinct_values(records: Iterable[CustomerRecord], field: str) -> dict[str | None, int]:
        """Profile the distinct raw values of a field with their row counts."""
        return dict(Counter(getattr(record, field) for record in records))
