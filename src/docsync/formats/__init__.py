"""
Format strategies.

Provides parse/serialize strategies for CSV and JSON and the registry
that resolves them by MIME type or file extension.
"""

from .base import ExportStrategy, ImportStrategy, filter_fields
from .casting import cast_row, cast_value
from .csv_format import CsvExportStrategy, CsvImportStrategy
from .json_format import JsonExportStrategy, JsonImportStrategy
from .registry import StrategyRegistry, default_registry

__all__ = [
    "ExportStrategy",
    "ImportStrategy",
    "filter_fields",
    "cast_row",
    "cast_value",
    "CsvExportStrategy",
    "CsvImportStrategy",
    "JsonExportStrategy",
    "JsonImportStrategy",
    "StrategyRegistry",
    "default_registry",
]
