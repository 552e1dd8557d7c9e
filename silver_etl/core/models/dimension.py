"""
DimensionRow model representing a reconciled, surrogate-keyed customer.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


class DimensionRow(BaseModel):
    """
    Customer dimension row combining CRM and ERP attributes.

    Attributes:
        customer_key: Surrogate key, dense and 1-based (None until assigned)
        customer_id: CRM natural identifier
        customer_number: CRM business key
        first_name: Trimmed first name
        last_name: Trimmed last name
        country: ERP country or "n/a"
        marital_status: "Single", "Married" or "n/a"
        gender: Resolved gender ("Male", "Female" or "n/a")
        birthdate: ERP birthdate or None
        create_date: CRM creation timestamp
    """

    customer_key: int | None = Field(None, gt=0)
    customer_id: int
    customer_number: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    country: str = "n/a"
    marital_status: str = "n/a"
    gender: str = "n/a"
    birthdate: date | None = None
    create_date: datetime | None = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "customer_key": 1,
                "customer_id": 11000,
                "customer_number": "AW00011000",
                "first_name": "Jon",
                "last_name": "Yang",
                "country": "Australia",
                "marital_status": "Married",
                "gender": "Male",
                "birthdate": "1971-10-06",
                "create_date": "2025-10-06T00:00:00",
            }
        }
