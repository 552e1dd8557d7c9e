"""
Product models: the slowly-changing product dimension and its current view.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, field_validator


class ProductRecord(BaseModel):
    """
    A product version from the CRM product table.

    A version is currently active when end_date is null.

    Attributes:
        product_id: Natural identifier of this product version
        product_key: Product business key
        name: Product name
        category_id: Category identifier (derived from product_key when absent)
        cost: Standard cost
        product_line: Product line code
        start_date: Start of the validity window
        end_date: End of the validity window, None while current
    """

    product_id: int | None = None
    product_key: str | None = None
    name: str | None = None
    category_id: str | None = None
    cost: Decimal | None = None
    product_line: str | None = None
    start_date: date | None = None
    end_date: date | None = None

    @field_validator(
        "product_id", "category_id", "cost", "start_date", "end_date",
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


class CurrentProduct(BaseModel):
    """Currently active product enriched with its ERP category."""

    product_id: int | None = None
    product_key: str | None = None
    name: str | None = None
    category_id: str | None = None
    category: str | None = None
    subcategory: str | None = None
    maintenance: str | None = None
    cost: Decimal | None = None
    product_line: str | None = None
    start_date: date | None = None

    class Config:
        frozen = True
