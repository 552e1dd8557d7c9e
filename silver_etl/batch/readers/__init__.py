"""
Bronze extract readers.
"""

from .bronze_reader import EXTRACTS, BronzeReader, Extract, map_rows
from .csv_reader import CSVReader

__all__ = [
    "CSVReader",
    "BronzeReader",
    "Extract",
    "EXTRACTS",
    "map_rows",
]
