"""
Import and export pipelines.
"""

from .exporter import DataExporter
from .importer import DataImporter
from .service import CsvIoService, build_csv_service

__all__ = [
    "DataExporter",
    "DataImporter",
    "CsvIoService",
    "build_csv_service",
]
