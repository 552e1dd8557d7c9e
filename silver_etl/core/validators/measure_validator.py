"""
SalesConsistencyValidator - checks Sales = Quantity * |Price|.
"""

from decimal import Decimal
from typing import Any

from silver_etl.core.models import ReasonCode

from .base_validator import BaseValidator


class SalesConsistencyValidator(BaseValidator):
    """
    Validates that the sales amount equals quantity times the absolute unit price.

    Rows with a null operand are skipped; nulls are reported by the
    required/range validators on the individual measures.

    Parameters:
    - quantity_field: Name of the quantity field (default "quantity")
    - price_field: Name of the unit price field (default "unit_price")
    """

    rule_type = "sales_consistency"

    def __init__(self, field_name: str = "sales_amount", parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)
        self.quantity_field = self.parameters.get("quantity_field", "quantity")
        self.price_field = self.parameters.get("price_field", "unit_price")

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        quantity = record.get(self.quantity_field)
        price = record.get(self.price_field)
        if value is None or quantity is None or price is None:
            return

        expected = Decimal(quantity) * abs(Decimal(price))
        if Decimal(value) != expected:
            raise self.fail(f"{value} != {quantity} * |{price}| ({expected})", ReasonCode.INCONSISTENT_MEASURE)
