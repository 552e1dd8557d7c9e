"""
AuditLog model recording one old/new value change made while cleaning a row.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class AuditLog(BaseModel):
    """
    Lineage entry for a single field-level change.

    Attributes:
        log_id: Auto-increment primary key
        record_ref: Business identifier of the changed row
        entity: Entity the row belongs to ("customer", "sales", "product")
        transformation_type: Kind of change (e.g., "field_trimming", "measure_repair")
        field_name: Which field was affected
        old_value: Original value (as string)
        new_value: New value (as string)
        rule_applied: Which stage or rule caused the change
        created_at: When the change happened
    """

    log_id: int | None = None
    record_ref: str
    entity: str
    transformation_type: str
    field_name: str | None = None
    old_value: str | None = None
    new_value: str | None = None
    rule_applied: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        json_schema_extra = {
            "example": {
                "log_id": 1,
                "record_ref": "SO43697",
                "entity": "sales",
                "transformation_type": "measure_repair",
                "field_name": "unit_price",
                "old_value": None,
                "new_value": "3578.00",
                "rule_applied": "MeasureRepairer",
            }
        }
