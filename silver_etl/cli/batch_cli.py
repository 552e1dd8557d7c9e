"""
Command-line interface for the bronze-to-silver pipeline.

Usage:
    silver-etl process --input-dir <dir> [options]
    silver-etl audit --input-dir <dir> [--config <file>]
"""

import argparse
import sys

from pyspark.sql import SparkSession

from silver_etl.batch.pipeline import SilverPipeline, process_directory
from silver_etl.batch.readers import BronzeReader
from silver_etl.core.config import load_settings
from silver_etl.core.report import DataQualityReport
from silver_etl.observability.logger import get_logger
from silver_etl.utils.validation import ValidationError, exception_rate, validate_directory
from silver_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)

DEFAULT_CONFIG = "config/pipeline.yaml"


def create_spark_session(app_name: str = "SilverETL") -> SparkSession:
    """
    Create a local Spark session for reading the bronze extracts.

    Args:
        app_name: Application name

    Returns:
        SparkSession
    """
    spark = SparkSession.builder \
        .appName(app_name) \
        .master("local[*]") \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.sql.adaptive.coalescePartitions.enabled", "true") \
        .getOrCreate()

    return spark


def _input_dir(args) -> str:
    try:
        return validate_directory(args.input_dir, must_exist=True)
    except ValidationError as e:
        logger.error(f"Invalid input directory: {e}")
        sys.exit(1)


def _log_report(title: str, report: DataQualityReport) -> None:
    logger.info("=" * 60)
    logger.info(title)
    logger.info("=" * 60)
    for line in report.summary_lines():
        logger.info(line)
    logger.info("=" * 60)


def process_command(args):
    """
    Execute the full bronze-to-silver run.

    Args:
        args: Command-line arguments
    """
    input_dir = _input_dir(args)
    settings = load_settings(args.config)
    logger.info(f"Processing bronze extracts in: {input_dir}")

    spark = create_spark_session("SilverETL-process")
    pool = None

    try:
        if args.dry_run:
            logger.info("DRY RUN MODE: No data will be written to database")
        else:
            logger.info("Initializing database connection...")
            pool = DatabaseConnectionPool(
                host=args.db_host,
                port=args.db_port,
                database=args.db_name,
                user=args.db_user,
                password=args.db_password,
            )
            pool.open()

        batch = process_directory(spark, input_dir, settings=settings, pool=pool)
        _log_report("PROCESSING COMPLETE", batch.report)

        if args.dry_run:
            logger.info("DRY RUN: No data was written to the database")

    except Exception as e:
        logger.error(f"Error during silver processing: {e}", exc_info=True)
        sys.exit(1)
    finally:
        if pool is not None:
            pool.close()
        spark.stop()

    rate = batch.report.exception_rate()
    if args.max_exception_rate is not None and rate > args.max_exception_rate:
        logger.error(f"Exception rate {rate:.1%} exceeds the allowed {args.max_exception_rate:.1%}")
        sys.exit(2)


def audit_command(args):
    """
    Print the data-quality findings of the bronze extracts without changing anything.

    Args:
        args: Command-line arguments
    """
    input_dir = _input_dir(args)
    settings = load_settings(args.config)
    spark = create_spark_session("SilverETL-audit")

    try:
        bundle = BronzeReader(spark).read_directory(input_dir)
        report = SilverPipeline(settings).audit(bundle)
        _log_report("DATA QUALITY AUDIT", report)
    except Exception as e:
        logger.error(f"Error during audit: {e}", exc_info=True)
        sys.exit(1)
    finally:
        spark.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="silver-etl",
        description="Bronze-to-silver cleaning pipeline for CRM/ERP extracts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Clean the extracts and load the silver tables
  silver-etl process --input-dir data/bronze

  # Clean without writing anything
  silver-etl process --input-dir data/bronze --dry-run

  # Fail the job when more than 5% of the rows are exceptions
  silver-etl process --input-dir data/bronze --max-exception-rate 0.05

  # Report data-quality findings only
  silver-etl audit --input-dir data/bronze
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Process command
    process_parser = subparsers.add_parser("process", help="Clean bronze extracts into silver tables")
    process_parser.add_argument(
        "--input-dir",
        required=True,
        help="Directory holding the bronze CSV extracts"
    )
    process_parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to pipeline configuration YAML (default: {DEFAULT_CONFIG})"
    )
    process_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Clean and report without writing to database"
    )
    process_parser.add_argument(
        "--max-exception-rate",
        type=exception_rate,
        default=None,
        help="Exit with status 2 when the share of excluded rows exceeds this value"
    )

    # Database connection arguments (fall back to DB_* environment variables)
    process_parser.add_argument("--db-host", default=None, help="Database host (env: DB_HOST)")
    process_parser.add_argument("--db-port", type=int, default=None, help="Database port (env: DB_PORT)")
    process_parser.add_argument("--db-name", default=None, help="Database name (env: DB_NAME)")
    process_parser.add_argument("--db-user", default=None, help="Database user (env: DB_USER)")
    process_parser.add_argument("--db-password", default=None, help="Database password (env: DB_PASSWORD)")

    # Audit command
    audit_parser = subparsers.add_parser("audit", help="Report data-quality findings without changes")
    audit_parser.add_argument(
        "--input-dir",
        required=True,
        help="Directory holding the bronze CSV extracts"
    )
    audit_parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG,
        help=f"Path to pipeline configuration YAML (default: {DEFAULT_CONFIG})"
    )

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "process":
        process_command(args)
    elif args.command == "audit":
        audit_command(args)


if __name__ == "__main__":
    main()
