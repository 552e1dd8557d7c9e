"""
Violation model representing a single data-quality finding with a reason code.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class ReasonCode(str, Enum):
    """Why a row was reported, dropped, nulled or repaired."""

    MISSING_KEY = "missing_key"
    DUPLICATE_KEY = "duplicate_key"
    UNTRIMMED_TEXT = "untrimmed_text"
    MALFORMED_DATE = "malformed_date"
    INCONSISTENT_MEASURE = "inconsistent_measure"
    UNREPAIRABLE_MEASURE = "unrepairable_measure"
    DIVISION_BY_ZERO = "division_by_zero"
    INVALID_COST = "invalid_cost"
    MALFORMED_ROW = "malformed_row"


class Violation(BaseModel):
    """
    A data-quality finding produced by a stage.

    Violations are report entries: producing one never mutates the row
    it describes, and none of them abort the batch.

    Attributes:
        stage: Stage that produced the finding (e.g., "deduplicator")
        reason: Reason code from the error taxonomy
        record_ref: Business identifier of the offending row, if any
        field_name: Field the finding is about
        value: Offending value rendered as a string
        message: Human-readable description
        raw_payload: The offending row as a plain dict
        detected_at: When the finding was produced
    """

    stage: str = Field(..., min_length=1)
    reason: ReasonCode
    record_ref: str | None = None
    field_name: str | None = None
    value: str | None = None
    message: str
    raw_payload: dict[str, Any] = Field(default_factory=dict)
    detected_at: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("value", mode="before")
    @classmethod
    def stringify_value(cls, v):
        """Offending values are stored as text whatever their type."""
        if v is None:
            return None
        return str(v)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "stage": "date_validator",
                "reason": "malformed_date",
                "record_ref": "SO43697",
                "field_name": "order_date_raw",
                "value": "20101329",
                "message": "20101329 is not a calendar date",
                "raw_payload": {"order_number": "SO43697", "order_date_raw": 20101329},
            }
        }
