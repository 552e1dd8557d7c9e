"""
Prometheus metrics collection for the silver pipeline

Counts rows through each stage, data-quality findings by reason code and
measure repairs, and times each stage.
"""
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()


# =======================
# STAGE METRICS
# =======================

rows_processed_total = Counter(
    name="silver_rows_processed_total",
    documentation="Rows handled by each stage",
    labelnames=["stage", "status"],  # status: kept, dropped, excluded
    registry=REGISTRY,
)

stage_duration_seconds = Histogram(
    name="silver_stage_duration_seconds",
    documentation="Time spent in each pipeline stage in seconds",
    labelnames=["stage"],
    buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
    registry=REGISTRY,
)

batch_size = Histogram(
    name="silver_batch_size_rows",
    documentation="Number of bronze rows per entity in each run",
    labelnames=["entity"],
    buckets=[10, 100, 1000, 10000, 50000, 100000, 500000],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

violations_total = Counter(
    name="silver_violations_total",
    documentation="Data-quality findings by stage and reason code",
    labelnames=["stage", "reason"],
    registry=REGISTRY,
)

measure_repairs_total = Counter(
    name="silver_measure_repairs_total",
    documentation="Sales measures recomputed by the business-rule repair",
    labelnames=["field"],
    registry=REGISTRY,
)

exception_rate = Gauge(
    name="silver_exception_rate",
    documentation="Share of bronze rows reported as exceptions in the last run",
    labelnames=["entity"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


class track_duration:
    """
    Context manager for timing a stage

    Usage:
        with track_duration(stage_duration_seconds, stage="deduplicator"):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    gauge.labels(**labels).set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    histogram.labels(**labels).observe(value)


# =======================
# STAGE HELPERS
# =======================

def record_stage(stage: str, kept: int, dropped: int = 0, violations=()) -> None:
    """
    Record the outcome of one stage.

    Args:
        stage: Stage name
        kept: Rows the stage emitted
        dropped: Rows the stage excluded from its output
        violations: Violations reported by the stage
    """
    increment_counter(rows_processed_total, kept, stage=stage, status="kept")
    if dropped:
        increment_counter(rows_processed_total, dropped, stage=stage, status="dropped")
    for violation in violations:
        increment_counter(violations_total, 1, stage=stage, reason=violation.reason.value)


def record_repair(field: str) -> None:
    increment_counter(measure_repairs_total, 1, field=field)
