"""
StageResult model representing the output of one pipeline stage (ephemeral).
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from .violation import ReasonCode, Violation

RowT = TypeVar("RowT")


class StageResult(BaseModel, Generic[RowT]):
    """
    Rows produced by a stage together with the violations it reported.

    Attributes:
        stage: Stage name
        rows: Output rows (new projections, never the input objects mutated)
        violations: Findings reported while producing the rows
    """

    stage: str
    rows: list[RowT] = Field(default_factory=list)
    violations: list[Violation] = Field(default_factory=list)

    def violations_for(self, reason: ReasonCode) -> list[Violation]:
        return [v for v in self.violations if v.reason == reason]
