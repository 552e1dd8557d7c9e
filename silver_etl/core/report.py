"""
Data-quality report summarizing the findings of one pipeline run.
"""

from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field

from silver_etl.core.models import ReasonCode, Violation


class DataQualityReport(BaseModel):
    """
    Counts of bronze rows, silver rows and findings per stage and reason.

    The report never decides whether a run failed; orchestration compares
    exception_rate() against its own threshold.

    Attributes:
        input_counts: Bronze rows read per entity
        output_counts: Silver rows produced per entity
        excluded_counts: Bronze rows kept out of the silver output per entity
        violation_counts: stage -> reason code -> number of findings
    """

    input_counts: dict[str, int] = Field(default_factory=dict)
    output_counts: dict[str, int] = Field(default_factory=dict)
    excluded_counts: dict[str, int] = Field(default_factory=dict)
    violation_counts: dict[str, dict[str, int]] = Field(default_factory=dict)

    @classmethod
    def build(
        cls,
        violations: Iterable[Violation],
        input_counts: dict[str, int] | None = None,
        output_counts: dict[str, int] | None = None,
        excluded_counts: dict[str, int] | None = None,
    ) -> "DataQualityReport":
        grouped: dict[str, Counter] = {}
        for violation in violations:
            grouped.setdefault(violation.stage, Counter())[violation.reason.value] += 1
        return cls(
            input_counts=dict(input_counts or {}),
            output_counts=dict(output_counts or {}),
            excluded_counts=dict(excluded_counts or {}),
            violation_counts={stage: dict(counts) for stage, counts in grouped.items()},
        )

    @property
    def total_violations(self) -> int:
        return sum(sum(reasons.values()) for reasons in self.violation_counts.values())

    def count(self, reason: ReasonCode, stage: str | None = None) -> int:
        """Number of findings with a reason code, optionally within one stage."""
        stages = [stage] if stage is not None else list(self.violation_counts)
        return sum(self.violation_counts.get(s, {}).get(reason.value, 0) for s in stages)

    def exception_rate(self, entity: str | None = None) -> float:
        """
        Share of bronze rows excluded from the silver output.

        Args:
            entity: Restrict to one entity; all entities when None

        Returns:
            Rate in [0, 1]; 0.0 when nothing was read
        """
        entities = [entity] if entity is not None else list(self.input_counts)
        read = sum(self.input_counts.get(e, 0) for e in entities)
        if read == 0:
            return 0.0
        excluded = sum(self.excluded_counts.get(e, 0) for e in entities)
        return excluded / read

    def summary_lines(self) -> list[str]:
        lines = []
        for entity in sorted(self.input_counts):
            lines.append(
                f"{entity}: {self.input_counts[entity]} read, "
                f"{self.output_counts.get(entity, 0)} written, "
                f"{self.excluded_counts.get(entity, 0)} excluded "
                f"({self.exception_rate(entity):.1%})"
            )
        for stage in sorted(self.violation_counts):
            for reason, count in sorted(self.violation_counts[stage].items()):
                lines.append(f"{stage} / {reason}: {count}")
        lines.append(f"Total findings: {self.total_violations}")
        return lines
