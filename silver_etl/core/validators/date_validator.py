"""
IntegerDateValidator - validates and parses YYYYMMDD-encoded integer dates.
"""

from datetime import date, datetime
from typing import Any

from silver_etl.core.models import ReasonCode

from .base_validator import BaseValidator, ValidationError

DEFAULT_MIN_DATE = 19000101
DEFAULT_MAX_DATE = 20250101


class IntegerDateValidator(BaseValidator):
    """
    Validates that an integer encodes a plausible calendar date.

    A value passes when it is positive, has exactly `digits` decimal
    digits, lies within [min, max] (both inclusive) and names a real
    calendar day.

    Parameters:
    - min: Lower bound as YYYYMMDD integer (default 19000101)
    - max: Upper bound as YYYYMMDD integer (default 20250101)
    - digits: Required digit count (default 8)
    """

    rule_type = "integer_date"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.min_value = int(self.parameters.get("min", DEFAULT_MIN_DATE))
        self.max_value = int(self.parameters.get("max", DEFAULT_MAX_DATE))
        self.digits = int(self.parameters.get("digits", 8))

        if self.min_value > self.max_value:
            raise ValueError(f"min ({self.min_value}) must not exceed max ({self.max_value})")

    def _fail(self, message: str) -> ValidationError:
        return self.fail(message, ReasonCode.MALFORMED_DATE)

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Validate the encoded date.

        Args:
            value: The YYYYMMDD integer (None is reported too)
            record: The entire record

        Raises:
            ValidationError: If the value is not a valid in-range calendar date
        """
        self.parse(value)

    def parse(self, value: Any) -> date:
        """
        Parse a YYYYMMDD integer into a date.

        Raises:
            ValidationError: For null, non-positive, wrong-length, out-of-range
                or impossible calendar values
        """
        if value is None:
            raise self._fail("Date is null")

        if isinstance(value, bool) or not isinstance(value, int):
            raise self._fail(f"Date must be an integer, got {type(value).__name__}")

        if value <= 0:
            raise self._fail(f"{value} is not a positive date value")

        if len(str(value)) != self.digits:
            raise self._fail(f"{value} does not have {self.digits} digits")

        if value < self.min_value or value > self.max_value:
            raise self._fail(f"{value} is outside [{self.min_value}, {self.max_value}]")

        try:
            return datetime.strptime(str(value), "%Y%m%d").date()
        except ValueError:
            raise self._fail(f"{value} is not a calendar date")
