"""
Pipeline configuration loading.
"""

from .pipeline_config import (
    DateSettings,
    ErpKeySettings,
    MeasureSettings,
    PipelineConfigLoader,
    PipelineSettings,
    ReconciliationSettings,
    SinkSettings,
    load_settings,
)

__all__ = [
    "DateSettings",
    "MeasureSettings",
    "ReconciliationSettings",
    "ErpKeySettings",
    "SinkSettings",
    "PipelineConfigLoader",
    "PipelineSettings",
    "load_settings",
]
