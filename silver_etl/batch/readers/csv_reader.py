"""
Spark CSV access for the bronze extracts.
"""

from typing import Any

from pyspark.sql import DataFrame, SparkSession

from silver_etl.observability.logger import get_logger

logger = get_logger(__name__)


class CSVReader:
    """
    Reads bronze CSV extracts using Spark.

    Every column is read as text: type coercion happens in the row models
    so that a bad cell is reported per row instead of being nulled by
    Spark's schema inference. Cell whitespace is preserved for the
    normalizer to trim and report.
    """

    def __init__(self, spark: SparkSession, delimiter: str = ","):
        self.spark = spark
        self.delimiter = delimiter

    def load(self, file_path: str) -> DataFrame:
        """Load an extract with a header row into a string-typed DataFrame."""
        return (
            self.spark.read
            .option("header", "true")
            .option("delimiter", self.delimiter)
            .option("mode", "PERMISSIVE")
            .option("ignoreLeadingWhiteSpace", "false")
            .option("ignoreTrailingWhiteSpace", "false")
            .csv(file_path)
        )

    def read_rows(self, file_path: str) -> tuple[list[str], list[dict[str, Any]]]:
        """
        Materialize an extract as plain dictionaries.

        Header names are trimmed and lower-cased so the source systems'
        inconsistent casing does not matter downstream.

        Returns:
            (normalized column names, rows as column -> cell text)
        """
        df = self.load(file_path)
        columns = [name.strip().lower() for name in df.columns]
        rows = [dict(zip(columns, row)) for row in df.collect()]
        logger.debug(f"Loaded {len(rows)} rows from {file_path}", extra={"path": file_path, "rows": len(rows)})
        return columns, rows
