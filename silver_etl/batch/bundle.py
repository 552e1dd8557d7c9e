"""
Containers for the bronze input and the silver output of one run.
"""

from pydantic import BaseModel, Field

from silver_etl.core.models import (
    CurrentProduct,
    CustomerRecord,
    DimensionRow,
    ErpCustomerAttributes,
    ErpLocationAttributes,
    ErpProductCategory,
    ProductRecord,
    RepairedSalesRecord,
    SalesRecord,
    Violation,
)
from silver_etl.core.report import DataQualityReport


class BronzeBundle(BaseModel):
    """
    All bronze rows of one run, fully materialized.

    Attributes:
        customers: CRM customer rows
        sales: CRM sales-detail rows
        products: CRM product versions
        erp_customers: ERP demographic rows
        erp_locations: ERP location rows
        categories: ERP product categories
        malformed: Rows that could not be read into a model
    """

    customers: list[CustomerRecord] = Field(default_factory=list)
    sales: list[SalesRecord] = Field(default_factory=list)
    products: list[ProductRecord] = Field(default_factory=list)
    erp_customers: list[ErpCustomerAttributes] = Field(default_factory=list)
    erp_locations: list[ErpLocationAttributes] = Field(default_factory=list)
    categories: list[ErpProductCategory] = Field(default_factory=list)
    malformed: list[Violation] = Field(default_factory=list)

    def input_counts(self) -> dict[str, int]:
        return {
            "customers": len(self.customers),
            "sales": len(self.sales),
            "products": len(self.products),
        }


class SilverBatch(BaseModel):
    """
    Result of one run: silver rows, every finding, and the summary report.

    Attributes:
        customers: Deduplicated, normalized CRM customers
        sales: Sales rows with valid-or-null dates and repaired measures
        products: Currently active products with their category
        dimension: Reconciled, surrogate-keyed customer dimension
        violations: Findings of every stage, in stage order
        report: Counts per entity, stage and reason
    """

    customers: list[CustomerRecord] = Field(default_factory=list)
    sales: list[RepairedSalesRecord] = Field(default_factory=list)
    products: list[CurrentProduct] = Field(default_factory=list)
    dimension: list[DimensionRow] = Field(default_factory=list)
    violations: list[Violation] = Field(default_factory=list)
    report: DataQualityReport = Field(default_factory=DataQualityReport)

