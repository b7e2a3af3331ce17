"""
Core data models for docsync.

All models use Pydantic for runtime validation and type safety.
"""

from .document import RESERVED_FIELDS, Document, strip_reserved
from .export_result import ExportResult, build_export_filename
from .field_value import FieldValue, Record
from .import_result import PARSE_FAILURE_ROW, ImportResult, ImportRowError
from .processor_options import ProcessorOptions

__all__ = [
    "Document",
    "RESERVED_FIELDS",
    "strip_reserved",
    "ExportResult",
    "build_export_filename",
    "FieldValue",
    "Record",
    "ImportResult",
    "ImportRowError",
    "PARSE_FAILURE_ROW",
    "ProcessorOptions",
]
