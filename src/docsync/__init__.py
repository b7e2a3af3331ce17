"""
docsync: CSV import/export for document collections.

Parses uploaded files into records, reconciles them against a document
store (create or update keyed by a chosen field), and exports whole
collections back to CSV.
"""

from .core.models import ExportResult, ImportResult, ProcessorOptions
from .pipeline import CsvIoService, DataExporter, DataImporter, build_csv_service

__version__ = "0.1.0"

__all__ = [
    "CsvIoService",
    "DataExporter",
    "DataImporter",
    "build_csv_service",
    "ExportResult",
    "ImportResult",
    "ProcessorOptions",
]
