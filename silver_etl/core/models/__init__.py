"""
Core data models for the bronze-to-silver pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .audit_log import AuditLog
from .customer import CustomerRecord, KeyProfile
from .dimension import DimensionRow
from .erp import ErpCustomerAttributes, ErpLocationAttributes, ErpProductCategory
from .product import CurrentProduct, ProductRecord
from .sales import RepairedSalesRecord, SalesDates, SalesRecord
from .stage_result import StageResult
from .violation import ReasonCode, Violation

__all__ = [
    "AuditLog",
    "CustomerRecord",
    "KeyProfile",
    "SalesRecord",
    "RepairedSalesRecord",
    "SalesDates",
    "ErpCustomerAttributes",
    "ErpLocationAttributes",
    "ErpProductCategory",
    "ProductRecord",
    "CurrentProduct",
    "DimensionRow",
    "StageResult",
    "ReasonCode",
    "Violation",
]
