"""
CustomerRecord model representing a CRM customer row (bronze and silver).
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


class CustomerRecord(BaseModel):
    """
    A CRM customer row.

    In bronze the identifier may be null and the names and codes are
    untrimmed free text. After the deduplicator and field normalizer the
    identifier is present and unique, names are trimmed, and the coded
    fields hold canonical labels.

    Attributes:
        customer_id: Natural identifier (nullable in raw input)
        customer_key: Business key shared with the ERP sources
        first_name: First name, possibly padded with whitespace
        last_name: Last name, possibly padded with whitespace
        marital_status_code: Raw code ("S", "M", free text) or canonical label
        gender_code: Raw code ("F", "M", free text) or canonical label
        created_at: Record creation timestamp, used for recency (naive, UTC for offset inputs)
    """

    customer_id: int | None = None
    customer_key: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    marital_status_code: str | None = None
    gender_code: str | None = None
    created_at: datetime | None = None

    @field_validator("customer_id", "created_at", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """CSV extracts encode nulls as empty strings."""
        if isinstance(v, str) and v.strip() == "":
            return None
        return v

    @field_validator("created_at")
    @classmethod
    def naive_utc(cls, v: datetime | None) -> datetime | None:
        """Offset timestamps are stored as naive UTC so every created_at compares."""
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "customer_id": 11000,
                "customer_key": "AW00011000",
                "first_name": " Jon",
                "last_name": "Yang ",
                "marital_status_code": "M",
                "gender_code": "m ",
                "created_at": "2025-10-06T00:00:00",
            }
        }


class KeyProfile(BaseModel):
    """
    Read-only profile of the customer identifier column.

    Attributes:
        total_rows: Rows inspected
        null_key_count: Rows whose identifier is null
        duplicate_counts: identifier -> number of rows, for identifiers seen more than once
    """

    total_rows: int = Field(..., ge=0)
    null_key_count: int = Field(0, ge=0)
    duplicate_counts: dict[int, int] = Field(default_factory=dict)

    @property
    def duplicate_row_count(self) -> int:
        """Rows that would be discarded by deduplication (excluding nulls)."""
        return sum(count - 1 for count in self.duplicate_counts.values())
