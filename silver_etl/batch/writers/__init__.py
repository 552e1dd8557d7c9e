"""
Silver and exceptions sink writers.
"""

from .exceptions_writer import ExceptionsWriter
from .silver_writer import SilverWriter

__all__ = [
    "SilverWriter",
    "ExceptionsWriter",
]
