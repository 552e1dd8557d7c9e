"""
Date Validator stage - turns YYYYMMDD integers into dates or nulls.

Invalid values never raise: they become None and are reported as
malformed_date so upstream owners can correct the extract.
"""

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from silver_etl.core.models import SalesDates, SalesRecord, StageResult, Violation
from silver_etl.core.validators import (
    DEFAULT_MAX_DATE,
    DEFAULT_MIN_DATE,
    IntegerDateValidator,
    ValidationError,
)
from silver_etl.observability.lineage import LineageTracker
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)

STAGE = "date_validator"
DEFAULT_DATE_FIELDS = ("order_date_raw", "ship_date_raw", "due_date_raw")


def _parsed_name(field: str) -> str:
    return field[: -len("_raw")] if field.endswith("_raw") else field


class DateCleaner:
    """
    Validates integer-encoded dates on sales rows.

    Usage:
        cleaner = DateCleaner(min_date=19000101, max_date=20250101)
        cleaner.parse(20240229)   # date(2024, 2, 29)
        cleaner.parse(0)          # None
    """

    def __init__(
        self,
        min_date: int = DEFAULT_MIN_DATE,
        max_date: int = DEFAULT_MAX_DATE,
        fields: Sequence[str] = DEFAULT_DATE_FIELDS,
        lineage: LineageTracker | None = None,
    ):
        unknown = set(map(_parsed_name, fields)) - set(SalesDates.model_fields)
        if unknown:
            raise ValueError(f"Unsupported date fields: {', '.join(sorted(unknown))}")

        self.fields = tuple(fields)
        self.lineage = lineage
        self._validators = {
            field: IntegerDateValidator(field, {"min": min_date, "max": max_date})
            for field in self.fields
        }
        self._default = IntegerDateValidator("date", {"min": min_date, "max": max_date})

    def is_valid(self, value: Any) -> bool:
        return self._default.is_valid(value, {})

    def parse(self, value: Any) -> date | None:
        """Parse a YYYYMMDD integer, returning None for anything invalid."""
        try:
            return self._default.parse(value)
        except ValidationError:
            return None

    def _check(self, record: SalesRecord, field: str) -> tuple[date | None, Violation | None]:
        value = getattr(record, field)
        try:
            return self._validators[field].parse(value), None
        except ValidationError as e:
            if value is None:
                # Absent dates are null already; nothing to correct upstream
                return None, None
            return None, e.to_violation(STAGE, record.order_number, value, record.model_dump(mode="json"))

    def list_violations(self, records: Iterable[SalesRecord]) -> list[Violation]:
        """
        List every non-null date failing the validity predicate.

        Read-only; one malformed_date violation per offending field.
        """
        violations = []
        for record in records:
            for field in self.fields:
                _, violation = self._check(record, field)
                if violation is not None:
                    violations.append(violation)
        return violations

    def clean_record(self, record: SalesRecord) -> tuple[SalesDates, list[Violation]]:
        parsed: dict[str, date | None] = {}
        violations = []
        for field in self.fields:
            value, violation = self._check(record, field)
            parsed[_parsed_name(field)] = value
            if violation is not None:
                violations.append(violation)
                if self.lineage is not None:
                    self.lineage.track_date_nulling(record.order_number, field, getattr(record, field))
        return SalesDates(**parsed), violations

    def clean(self, records: Iterable[SalesRecord]) -> StageResult[SalesDates]:
        """
        Parse the configured date fields of every row.

        Returns:
            StageResult whose rows align one-to-one with the input rows
        """
        rows = []
        violations = []
        for record in records:
            dates, found = self.clean_record(record)
            rows.append(dates)
            violations.extend(found)

        logger.info(
            f"Validated dates on {len(rows)} sales rows, {len(violations)} nulled",
            extra={"stage": STAGE, "rows": len(rows), "nulled": len(violations)},
        )
        return StageResult(stage=STAGE, rows=rows, violations=violations)
