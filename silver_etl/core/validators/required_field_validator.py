"""
RequiredFieldValidator - rejects rows whose key field is absent, null or blank.
"""

from typing import Any

from silver_etl.core.models import ReasonCode

from .base_validator import BaseValidator


class RequiredFieldValidator(BaseValidator):
    """
    Validates that a key field holds a value.

    Parameters:
    - allow_empty_string: Accept "" and whitespace-only strings
    - reason: Reason code to report (default: missing_key)
    """

    rule_type = "required_field"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.allow_empty_string = self.parameters.get("allow_empty_string", False)
        self.reason = ReasonCode(self.parameters.get("reason", ReasonCode.MISSING_KEY))

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        if self.field_name not in record:
            problem = "is missing from record"
        elif value is None:
            problem = "is null"
        elif isinstance(value, str) and not value.strip() and not self.allow_empty_string:
            problem = "is blank"
        else:
            return
        raise self.fail(f"{self.field_name} {problem}", self.reason)
