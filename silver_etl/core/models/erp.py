"""
ERP secondary-source models joined to CRM customers and products.
"""

from datetime import date

from pydantic import BaseModel, field_validator


class ErpCustomerAttributes(BaseModel):
    """
    ERP customer demographics (erp_cust_az12).

    Attributes:
        source_customer_key: ERP customer key, joined to CustomerRecord.customer_key
        gender: Gender label as recorded by the ERP system
        birthdate: Date of birth
    """

    source_customer_key: str
    gender: str | None = None
    birthdate: date | None = None

    @field_validator("gender", "birthdate", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    class Config:
        frozen = True


class ErpLocationAttributes(BaseModel):
    """
    ERP customer location (erp_loc_a101).

    Attributes:
        source_customer_key: ERP customer key
        country: Country name
    """

    source_customer_key: str
    country: str | None = None

    @field_validator("country", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    class Config:
        frozen = True


class ErpProductCategory(BaseModel):
    """
    ERP product category reference (erp_px_cat_g1v2).

    Attributes:
        category_id: Category identifier, joined to ProductRecord.category_id
        category: Category name
        subcategory: Subcategory name
        maintenance: Whether the product line needs maintenance ("Yes"/"No")
    """

    category_id: str
    category: str | None = None
    subcategory: str | None = None
    maintenance: str | None = None

    class Config:
        frozen = True
