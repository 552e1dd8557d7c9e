"""
Sales models: raw sales-detail rows and their repaired projection.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class SalesRecord(BaseModel):
    """
    A raw sales-detail row.

    Dates arrive as YYYYMMDD integers (0 or garbage when unknown); measures
    may be null, zero, negative or mutually inconsistent.

    Attributes:
        order_number: Sales order number
        product_key: Product business key
        customer_id: Customer natural identifier
        order_date_raw: Integer-encoded order date
        ship_date_raw: Integer-encoded ship date
        due_date_raw: Integer-encoded due date
        sales_amount: Line amount
        quantity: Units sold
        unit_price: Price per unit
    """

    order_number: str | None = None
    product_key: str | None = None
    customer_id: int | None = None
    order_date_raw: int | None = None
    ship_date_raw: int | None = None
    due_date_raw: int | None = None
    sales_amount: Decimal | None = None
    quantity: int | None = None
    unit_price: Decimal | None = None

    @field_validator(
        "customer_id", "order_date_raw", "ship_date_raw", "due_date_raw",
        "sales_amount", "quantity", "unit_price",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        """CSV extracts encode nulls as empty strings."""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "order_number": "SO43697",
                "product_key": "BK-R93R-62",
                "customer_id": 21768,
                "order_date_raw": 20101229,
                "ship_date_raw": 20110105,
                "due_date_raw": 20110110,
                "sales_amount": "3578",
                "quantity": 1,
                "unit_price": None,
            }
        }


class RepairedSalesRecord(BaseModel):
    """
    Silver projection of a sales row after date validation and measure repair.

    Both the original and the repaired measures are kept so every repair
    stays auditable.

    Attributes:
        order_number: Sales order number
        product_key: Product business key
        customer_id: Customer natural identifier
        order_date: Parsed order date or None when invalid
        ship_date: Parsed ship date or None when invalid
        due_date: Parsed due date or None when invalid
        quantity: Units sold (always > 0)
        old_sales_amount: Sales amount as received
        old_unit_price: Unit price as received
        sales_amount: Repaired sales amount (= quantity * unit_price)
        unit_price: Repaired unit price (> 0)
        repairs: Names of the measures that changed
    """

    order_number: str | None = None
    product_key: str | None = None
    customer_id: int | None = None
    order_date: date | None = None
    ship_date: date | None = None
    due_date: date | None = None
    quantity: int = Field(..., gt=0)
    old_sales_amount: Decimal | None = None
    old_unit_price: Decimal | None = None
    sales_amount: Decimal = Field(..., gt=0)
    unit_price: Decimal = Field(..., gt=0)
    repairs: list[str] = Field(default_factory=list)

    @property
    def was_repaired(self) -> bool:
        return bool(self.repairs)

    class Config:
        frozen = True


class SalesDates(BaseModel):
    """Parsed dates of one sales row; None where the encoded value was invalid."""

    order_date: date | None = None
    ship_date: date | None = None
    due_date: date | None = None

    class Config:
        frozen = True
