"""
JSON array parse and serialize strategies.

Values keep their JSON types, so no casting is applied on import.
"""

import json
from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from docsync.core.errors import ParseError
from docsync.core.models import (
    Document,
    ExportResult,
    ProcessorOptions,
    Record,
    build_export_filename,
)

from .base import ExportStrategy, ImportStrategy, filter_fields
from .csv_format import decode_payload


class JsonImportStrategy(ImportStrategy):
    """
    Parses a JSON array of objects; blank input is an empty array.
    """

    mime_types = ("application/json",)
    file_extensions = ("json",)

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def parse(self, data: bytes | str, options: ProcessorOptions) -> list[Record]:
        text = decode_payload(data, self.encoding)
        if not text.strip():
            return []

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Malformed JSON: {e.msg}", line=e.lineno) from e

        if not isinstance(payload, list):
            raise ParseError(f"Expected a JSON array, got {type(payload).__name__}")

        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise ParseError(f"Element {index} is not an object")

        return payload


class JsonExportStrategy(ExportStrategy):
    """
    Serializes documents to a pretty-printed JSON array.
    """

    mime_type = "application/json; charset=utf-8"
    file_extension = "json"

    def __init__(self, indent: int | None = 2, clock: Callable[[], datetime] | None = None):
        self.indent = indent
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def format(self, documents: Sequence[Document], options: ProcessorOptions) -> ExportResult:
        rows = filter_fields(documents, options.exclude_fields)
        data = json.dumps(rows, ensure_ascii=False, indent=self.indent) if rows else ""
        return ExportResult(
            data=data,
            mime_type=self.mime_type,
            filename=build_export_filename(options.collection, self.file_extension, self.clock()),
        )
