"""
Row predicates used by the cleaning stages and their audit listings.

Provides validators for required keys, numeric ranges, integer-encoded
dates and the sales consistency rule.
"""

from .base_validator import BaseValidator, ValidationError
from .date_validator import DEFAULT_MAX_DATE, DEFAULT_MIN_DATE, IntegerDateValidator
from .measure_validator import SalesConsistencyValidator
from .range_validator import RangeValidator
from .required_field_validator import RequiredFieldValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "RangeValidator",
    "IntegerDateValidator",
    "SalesConsistencyValidator",
    "DEFAULT_MIN_DATE",
    "DEFAULT_MAX_DATE",
]
