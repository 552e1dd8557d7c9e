"""
Base validator interface for the row predicates used by the cleaning stages.

A validator checks one field of a row and raises ValidationError carrying
the reason code under which the finding is reported.
"""

from abc import ABC, abstractmethod
from typing import Any

from silver_etl.core.models import ReasonCode, Violation


class ValidationError(Exception):
    """Raised when a validation predicate fails."""

    def __init__(
        self,
        rule_name: str,
        field_name: str,
        message: str,
        reason: ReasonCode = ReasonCode.MALFORMED_ROW,
    ):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        self.reason = reason
        super().__init__(f"[{rule_name}] {field_name}: {message}")

    def to_violation(
        self,
        stage: str,
        record_ref: Any = None,
        value: Any = None,
        raw_payload: dict[str, Any] | None = None,
    ) -> Violation:
        """Turn the failure into a report entry of the given stage."""
        return Violation(
            stage=stage,
            reason=self.reason,
            record_ref=str(record_ref) if record_ref is not None else None,
            field_name=self.field_name,
            value=value,
            message=self.message,
            raw_payload=raw_payload or {},
        )


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Subclasses read their options from ``parameters`` and implement
    validate(); ``record`` is the whole row as a dict for predicates that
    look across fields.
    """

    rule_type: str = "base"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: If the value breaks the rule
        """

    def fail(self, message: str, reason: ReasonCode) -> ValidationError:
        return ValidationError(rule_name=self.rule_type, field_name=self.field_name, message=message, reason=reason)

    def is_valid(self, value: Any, record: dict[str, Any]) -> bool:
        try:
            self.validate(value, record)
        except ValidationError:
            return False
        return True

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"
