"""
Batch orchestration: bronze readers, the silver pipeline and sink writers.
"""

from .bundle import BronzeBundle, SilverBatch
from .pipeline import SilverPipeline, process_directory

__all__ = [
    "BronzeBundle",
    "SilverBatch",
    "SilverPipeline",
    "process_directory",
]
