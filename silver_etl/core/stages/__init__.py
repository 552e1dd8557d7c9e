"""
Cleaning, validation and conformance stages.

Each stage is a pure transformation from one input collection to one
output collection plus a list of violations; audit listings never mutate.
"""

from .date_cleaner import DateCleaner
from .deduplicator import Deduplicator
from .measure_repairer import MeasureRepairer, safe_divide
from .normalizer import FieldNormalizer, normalize_gender, normalize_marital_status, trim_text
from .product_cleaner import ProductCleaner, split_product_key
from .reconciler import CustomerReconciler, ErpKeyNormalizer, SourcePrecedence
from .surrogate_keys import KeyRegistry, SurrogateKeyAssigner
from .temporal_filter import TemporalFilter

__all__ = [
    "Deduplicator",
    "FieldNormalizer",
    "normalize_gender",
    "normalize_marital_status",
    "trim_text",
    "DateCleaner",
    "MeasureRepairer",
    "safe_divide",
    "CustomerReconciler",
    "SourcePrecedence",
    "ErpKeyNormalizer",
    "SurrogateKeyAssigner",
    "KeyRegistry",
    "TemporalFilter",
    "ProductCleaner",
    "split_product_key",
]
