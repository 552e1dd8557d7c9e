"""
Bronze-to-silver pipeline orchestration.

Coordinates the flow:
    customers: deduplicate → normalize ─┐
    ERP customers + locations ──────────┴→ reconcile → assign surrogate keys
    sales:     validate dates → repair measures
    products:  clean → keep current versions (+ ERP category)
"""

from pathlib import Path

from pyspark.sql import SparkSession

from silver_etl.batch.bundle import BronzeBundle, SilverBatch
from silver_etl.batch.readers import BronzeReader
from silver_etl.batch.writers import ExceptionsWriter, SilverWriter
from silver_etl.core.config import PipelineSettings
from silver_etl.core.models import StageResult, Violation
from silver_etl.core.report import DataQualityReport
from silver_etl.core.stages import (
    CustomerReconciler,
    DateCleaner,
    Deduplicator,
    ErpKeyNormalizer,
    FieldNormalizer,
    KeyRegistry,
    MeasureRepairer,
    ProductCleaner,
    SourcePrecedence,
    SurrogateKeyAssigner,
    TemporalFilter,
)
from silver_etl.observability import metrics
from silver_etl.observability.lineage import LineageTracker
from silver_etl.observability.logger import get_logger, log_operation
from silver_etl.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)


class SilverPipeline:
    """
    Runs every cleaning stage over a fully materialized bronze bundle.

    The pipeline itself never touches storage: transform() and audit() work
    on in-memory rows, process_directory() wires the reader and writers
    around them.
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        lineage: LineageTracker | None = None,
        key_registry: KeyRegistry | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Cleaning parameters (defaults when omitted)
            lineage: Optional tracker recording old/new values of every change
            key_registry: Optional persisted id -> surrogate key mapping
        """
        self.settings = settings or PipelineSettings()
        self.lineage = lineage

        recon = self.settings.reconciliation
        erp_keys = self.settings.erp_keys

        self.deduplicator = Deduplicator(lineage=lineage)
        self.normalizer = FieldNormalizer(lineage=lineage)
        self.date_cleaner = DateCleaner(
            min_date=self.settings.dates.min,
            max_date=self.settings.dates.max,
            fields=self.settings.dates.fields,
            lineage=lineage,
        )
        self.repairer = MeasureRepairer(price_precision=self.settings.measures.price_precision, lineage=lineage)
        self.product_cleaner = ProductCleaner()
        self.temporal_filter = TemporalFilter()
        self.reconciler = CustomerReconciler(
            gender_precedence=SourcePrecedence(
                recon.gender_precedence,
                missing_markers=[recon.missing_label],
                default=recon.missing_label,
            ),
            key_normalizer=ErpKeyNormalizer(erp_keys.strip_prefixes, erp_keys.remove_chars),
        )
        self.key_assigner = SurrogateKeyAssigner(registry=key_registry)

    def _run(self, result_fn, stage: str, rows_in: int, *args) -> StageResult:
        with metrics.track_duration(metrics.stage_duration_seconds, stage=stage):
            result = result_fn(*args)
        dropped = max(rows_in - len(result.rows), 0)
        metrics.record_stage(stage, kept=len(result.rows), dropped=dropped, violations=result.violations)
        return result

    def transform(self, bundle: BronzeBundle) -> SilverBatch:
        """
        Run every stage and collect the silver rows and all findings.

        Row-level problems never raise: they end up in SilverBatch.violations.

        Returns:
            SilverBatch with silver rows, violations and the report
        """
        with log_operation("silver transform", logger=logger, **bundle.input_counts()):
            deduped = self._run(
                self.deduplicator.deduplicate, "deduplicator", len(bundle.customers), bundle.customers
            )
            normalized = self._run(
                self.normalizer.normalize_all, "field_normalizer", len(deduped.rows), deduped.rows
            )

            dates = self._run(self.date_cleaner.clean, "date_validator", len(bundle.sales), bundle.sales)
            repaired = self._run(
                self.repairer.repair_all, "business_rule_repairer", len(bundle.sales), bundle.sales, dates.rows
            )

            cleaned_products = self._run(
                self.product_cleaner.clean, "product_cleaner", len(bundle.products), bundle.products
            )
            current = self._run(
                self.temporal_filter.current_products,
                "temporal_filter",
                # Historical versions are filtered, not dropped as exceptions
                0,
                cleaned_products.rows,
                bundle.categories,
            )

            reconciled = self._run(
                self.reconciler.reconcile,
                "cross_source_reconciler",
                len(normalized.rows),
                normalized.rows,
                bundle.erp_customers,
                bundle.erp_locations,
            )
            keyed = self._run(
                self.key_assigner.assign, "surrogate_key_assigner", len(reconciled.rows), reconciled.rows
            )

            violations: list[Violation] = [
                *bundle.malformed,
                *deduped.violations,
                *dates.violations,
                *repaired.violations,
                *cleaned_products.violations,
                *reconciled.violations,
            ]

            output_counts = {
                "customers": len(normalized.rows),
                "sales": len(repaired.rows),
                "products": len(current.rows),
                "dimension": len(keyed.rows),
            }
            report = DataQualityReport.build(
                violations,
                input_counts=bundle.input_counts(),
                output_counts=output_counts,
                excluded_counts={
                    "customers": len(bundle.customers) - len(deduped.rows),
                    "sales": len(bundle.sales) - len(repaired.rows),
                    "products": 0,
                },
            )
            for entity in report.input_counts:
                metrics.set_gauge(metrics.exception_rate, report.exception_rate(entity), entity=entity)

        return SilverBatch(
            customers=normalized.rows,
            sales=repaired.rows,
            products=current.rows,
            dimension=keyed.rows,
            violations=violations,
            report=report,
        )

    def audit(self, bundle: BronzeBundle) -> DataQualityReport:
        """
        Run only the read-only violation listings over the bronze rows.

        Nothing is transformed, tracked or written.
        """
        with log_operation("silver audit", logger=logger, **bundle.input_counts()):
            violations = [
                *bundle.malformed,
                *self.deduplicator.list_violations(bundle.customers),
                *self.normalizer.list_violations(bundle.customers),
                *self.date_cleaner.list_violations(bundle.sales),
                *self.repairer.list_violations(bundle.sales),
                *self.product_cleaner.list_violations(bundle.products),
            ]
        return DataQualityReport.build(violations, input_counts=bundle.input_counts())


def process_directory(
    spark: SparkSession,
    input_dir: str | Path,
    settings: PipelineSettings | None = None,
    pool: DatabaseConnectionPool | None = None,
) -> SilverBatch:
    """
    Read the bronze extracts of a directory, transform them and write the results.

    Args:
        spark: Active Spark session used by the reader
        input_dir: Directory holding the bronze CSV extracts
        settings: Cleaning and sink parameters
        pool: Open connection pool; None runs without writing (dry run)

    Returns:
        SilverBatch of the run
    """
    settings = settings or PipelineSettings()
    bundle = BronzeReader(spark).read_directory(input_dir)

    lineage = None
    if pool is not None:
        lineage = LineageTracker(pool, table=settings.sink.tables["audit_log"], schema=settings.sink.schema_name)

    registry = None
    if pool is not None and settings.sink.stable_keys:
        registry = KeyRegistry(pool.fetch_key_assignments(settings.sink.schema_name, settings.sink.tables["dimension"]))
        logger.info(f"Loaded {len(registry.as_dict())} existing surrogate keys")

    batch = SilverPipeline(settings, lineage=lineage, key_registry=registry).transform(bundle)

    if pool is None:
        logger.info("No database configured: skipping silver and exceptions writes")
        return batch

    with log_operation("silver write", logger=logger):
        written = SilverWriter(pool, settings.sink).write_batch(batch)
        exceptions = ExceptionsWriter(pool, settings.sink).write(batch.violations)
        audited = lineage.flush()
    logger.info(
        f"Wrote silver tables {written}, {exceptions} exceptions, {audited} audit entries",
        extra={"written": written, "exceptions": exceptions, "audit_entries": audited},
    )
    return batch
