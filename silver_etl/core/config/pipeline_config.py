"""
Pipeline configuration management.

Loads cleaning parameters from YAML files into a validated settings model.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from silver_etl.core.validators import DEFAULT_MAX_DATE, DEFAULT_MIN_DATE
from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)


class DateSettings(BaseModel):
    """Sanity bounds and fields for integer-encoded dates."""

    min: int = DEFAULT_MIN_DATE
    max: int = DEFAULT_MAX_DATE
    fields: list[str] = Field(
        default_factory=lambda: ["order_date_raw", "ship_date_raw", "due_date_raw"]
    )

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min > self.max:
            raise ValueError(f"dates.min ({self.min}) must not exceed dates.max ({self.max})")
        return self


class MeasureSettings(BaseModel):
    price_precision: int = Field(2, ge=0, le=10)


class ReconciliationSettings(BaseModel):
    gender_precedence: list[str] = Field(default_factory=lambda: ["crm", "erp"], min_length=1)
    missing_label: str = "n/a"


class ErpKeySettings(BaseModel):
    strip_prefixes: list[str] = Field(default_factory=lambda: ["NAS"])
    remove_chars: list[str] = Field(default_factory=lambda: ["-"])


class SinkSettings(BaseModel):
    """Target schema and table names for the silver sink."""

    schema_name: str = Field("silver", alias="schema")
    tables: dict[str, str] = Field(
        default_factory=lambda: {
            "customers": "crm_cust_info",
            "sales": "crm_sales_details",
            "products": "crm_prd_info",
            "dimension": "dim_customers",
            "exceptions": "dq_exceptions",
            "audit_log": "audit_log",
        }
    )
    # Seed surrogate keys from the existing dimension table instead of re-ranking
    stable_keys: bool = False

    class Config:
        populate_by_name = True


class PipelineSettings(BaseModel):
    """
    Complete pipeline configuration.

    Every section has defaults, so an empty YAML document yields a
    working configuration.
    """

    dates: DateSettings = Field(default_factory=DateSettings)
    measures: MeasureSettings = Field(default_factory=MeasureSettings)
    reconciliation: ReconciliationSettings = Field(default_factory=ReconciliationSettings)
    erp_keys: ErpKeySettings = Field(default_factory=ErpKeySettings)
    sink: SinkSettings = Field(default_factory=SinkSettings)


class PipelineConfigLoader:
    """
    Loads pipeline settings from YAML configuration files.

    Expected YAML format:
    ```yaml
    dates:
      min: 19000101
      max: 20250101
      fields: [order_date_raw, ship_date_raw, due_date_raw]

    measures:
      price_precision: 2

    reconciliation:
      gender_precedence: [crm, erp]

    erp_keys:
      strip_prefixes: [NAS]
      remove_chars: ["-"]

    sink:
      schema: silver
      tables:
        customers: crm_cust_info
    ```
    """

    KNOWN_SECTIONS = {"dates", "measures", "reconciliation", "erp_keys", "sink"}

    def __init__(self, config_path: str | Path):
        """
        Initialize the config loader.

        Args:
            config_path: Path to the YAML configuration file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Pipeline configuration file not found: {config_path}")

    def load_settings(self) -> PipelineSettings:
        """
        Load and validate settings from the YAML file.

        Returns:
            PipelineSettings

        Raises:
            ValueError: If the YAML is not a mapping or names unknown sections
            pydantic.ValidationError: If a section holds invalid values
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        unknown = set(config) - self.KNOWN_SECTIONS
        if unknown:
            raise ValueError(f"Unknown configuration sections: {', '.join(sorted(unknown))}")

        return self._parse(config)

    def _parse(self, config: dict[str, Any]) -> PipelineSettings:
        sink = config.get("sink") or {}
        if "tables" in sink:
            # Partial table overrides keep the remaining defaults
            tables = {**SinkSettings().tables, **sink["tables"]}
            sink = {**sink, "tables": tables}
        return PipelineSettings.model_validate({**config, "sink": sink})


def load_settings(config_path: str | Path | None) -> PipelineSettings:
    """Load settings from a path, or return defaults when no path is given or the file is missing."""
    if config_path is None:
        return PipelineSettings()
    if not Path(config_path).exists():
        logger.warning(f"Pipeline configuration file not found: {config_path}, using defaults")
        return PipelineSettings()
    return PipelineConfigLoader(config_path).load_settings()
