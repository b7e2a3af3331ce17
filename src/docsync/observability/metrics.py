"""
Prometheus metrics collection for docsync

This module provides metrics instrumentation for monitoring
import reconciliation and export throughput.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# IMPORT METRICS
# =======================

records_imported_total = Counter(
    name="docsync_records_imported_total",
    documentation="Records reconciled by the importer",
    labelnames=["collection", "outcome"],  # outcome: created, updated, skipped, failed
    registry=REGISTRY,
)

import_parse_failures_total = Counter(
    name="docsync_import_parse_failures_total",
    documentation="Import payloads rejected by their format strategy",
    labelnames=["collection"],
    registry=REGISTRY,
)

import_duration_seconds = Histogram(
    name="docsync_import_duration_seconds",
    documentation="Time spent in one import call",
    labelnames=["collection"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)


# =======================
# EXPORT METRICS
# =======================

documents_exported_total = Counter(
    name="docsync_documents_exported_total",
    documentation="Documents serialized by the exporter",
    labelnames=["collection"],
    registry=REGISTRY,
)

export_pages_fetched_total = Counter(
    name="docsync_export_pages_fetched_total",
    documentation="Repository pages fetched while exporting",
    labelnames=["collection"],
    registry=REGISTRY,
)

export_duration_seconds = Histogram(
    name="docsync_export_duration_seconds",
    documentation="Time spent in one export call",
    labelnames=["collection"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)


# =======================
# EXPOSITION
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    The CLI writes this to --metrics-file for a node-exporter textfile
    collector.

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


# =======================
# HELPERS
# =======================

class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(export_duration_seconds, collection="api::a.a"):
            # do work
            pass
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


def record_import_result(collection: str, created: int, updated: int, skipped: int, failed: int) -> None:
    """
    Record the counters of a finished import.

    Args:
        collection: Target collection identifier
        created: Documents created
        updated: Documents updated
        skipped: Records skipped
        failed: Records that failed
    """
    for outcome, value in (
        ("created", created),
        ("updated", updated),
        ("skipped", skipped),
        ("failed", failed),
    ):
        if value > 0:
            increment_counter(records_imported_total, value, collection=collection, outcome=outcome)


def record_parse_failure(collection: str) -> None:
    increment_counter(import_parse_failures_total, 1, collection=collection)


def record_export(collection: str, document_count: int, page_count: int) -> None:
    """
    Record a finished export.

    Args:
        collection: Source collection identifier
        document_count: Documents serialized
        page_count: Repository pages fetched
    """
    increment_counter(export_pages_fetched_total, page_count, collection=collection)
    if document_count > 0:
        increment_counter(documents_exported_total, document_count, collection=collection)
