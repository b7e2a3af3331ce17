"""
CSV parse and serialize strategies.
"""

import csv
import io
import json
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from docsync.core.errors import ParseError
from docsync.core.models import (
    Document,
    ExportResult,
    ProcessorOptions,
    Record,
    build_export_filename,
)

from .base import ExportStrategy, ImportStrategy, filter_fields
from .casting import cast_row

BOM = "\ufeff"


def decode_payload(data: bytes | str, encoding: str = "utf-8") -> str:
    """
    Decode a payload to text and strip a leading byte-order mark.

    Raises:
        ParseError: If the bytes are not valid in ``encoding``
    """
    if isinstance(data, bytes):
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError as e:
            raise ParseError(f"Payload is not valid {encoding}: {e}") from e
    else:
        text = data
    if text.startswith(BOM):
        text = text[len(BOM):]
    return text


class CsvImportStrategy(ImportStrategy):
    """
    Parses CSV with a header row into typed records.

    Blank lines are skipped, fields are trimmed and numeric values are
    cast. Any grammar violation fails the whole call.
    """

    mime_types = ("text/csv", "application/csv")
    file_extensions = ("csv",)

    def __init__(
        self,
        delimiter: str = ",",
        literal_fields: Iterable[str] = (),
        encoding: str = "utf-8",
    ):
        """
        Initialize CSV import strategy.

        Args:
            delimiter: Field delimiter
            literal_fields: Fields kept as strings even when numeric-looking
            encoding: Encoding used to decode byte payloads
        """
        self.delimiter = delimiter
        self.literal_fields = frozenset(literal_fields)
        self.encoding = encoding

    def parse(self, data: bytes | str, options: ProcessorOptions) -> list[Record]:
        text = decode_payload(data, self.encoding)
        self._check_quoting(text)
        # Whitespace after a closing quote is kept by the reader and trimmed below
        reader = csv.reader(
            io.StringIO(text, newline=""),
            delimiter=self.delimiter,
            skipinitialspace=True,
        )

        header: list[str] | None = None
        records: list[Record] = []
        try:
            for row in reader:
                if self._is_blank(row):
                    continue
                fields = [value.strip() for value in row]
                if header is None:
                    header = fields
                    continue
                if len(fields) != len(header):
                    raise ParseError(
                        f"Invalid record length: expected {len(header)} fields, got {len(fields)}",
                        line=reader.line_num,
                    )
                records.append(cast_row(dict(zip(header, fields)), self.literal_fields))
        except csv.Error as e:
            raise ParseError(f"Malformed CSV: {e}", line=reader.line_num) from e

        return records

    def _check_quoting(self, text: str) -> None:
        """
        Reject quoted fields that are never closed or are followed by
        anything other than spaces or tabs before the next delimiter.

        Raises:
            ParseError: With the line of the offending quote
        """
        line = 1
        quote_line = 1
        state = "start"
        i = 0
        while i < len(text):
            ch = text[i]
            if state == "quoted":
                if ch == '"':
                    if text[i + 1 : i + 2] == '"':
                        i += 2
                        continue
                    state = "closed"
            elif ch == self.delimiter or ch in "\r\n":
                state = "start"
            elif state == "start":
                if ch == '"':
                    state = "quoted"
                    quote_line = line
                elif ch != " ":
                    state = "unquoted"
            elif state == "closed" and ch not in " \t":
                raise ParseError(f"Malformed CSV: unexpected {ch!r} after closing quote", line=line)
            if ch == "\n":
                line += 1
            i += 1

        if state == "quoted":
            raise ParseError("Malformed CSV: unterminated quoted field", line=quote_line)

    @staticmethod
    def _is_blank(row: list[str]) -> bool:
        return not row or (len(row) == 1 and not row[0].strip())


class CsvExportStrategy(ExportStrategy):
    """
    Serializes documents to CSV with a header row.

    Columns are the union of keys across all documents in first-seen
    order; a document missing a column gets an empty cell.
    """

    mime_type = "text/csv; charset=utf-8"
    file_extension = "csv"

    def __init__(
        self,
        delimiter: str = ",",
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize CSV export strategy.

        Args:
            delimiter: Field delimiter
            clock: Returns the time embedded in filenames (UTC now by default)
        """
        self.delimiter = delimiter
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def format(self, documents: Sequence[Document], options: ProcessorOptions) -> ExportResult:
        rows = filter_fields(documents, options.exclude_fields)
        return ExportResult(
            data=self.stringify(rows),
            mime_type=self.mime_type,
            filename=build_export_filename(options.collection, self.file_extension, self.clock()),
        )

    def stringify(self, rows: list[dict[str, Any]]) -> str:
        """
        Write rows as CSV text; zero rows yield an empty string.
        """
        if not rows:
            return ""

        columns: dict[str, None] = {}
        for row in rows:
            for key in row:
                columns.setdefault(key, None)

        output = io.StringIO(newline="")
        writer = csv.writer(output, delimiter=self.delimiter, lineterminator="\n")
        writer.writerow(columns)
        for row in rows:
            writer.writerow([serialize_cell(row.get(column)) for column in columns])
        return output.getvalue()


def serialize_cell(value: Any) -> str:
    """
    Render one value as CSV cell text.

    None becomes empty, containers become compact JSON and booleans
    become "true"/"false".
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)
