"""
Base strategy interfaces for all formats.

Import strategies turn raw payloads into records; export strategies turn
documents into a serialized payload. Importer and exporter depend only on
these interfaces, so a new format is one new pair of subclasses.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from docsync.core.models import Document, ExportResult, ProcessorOptions, Record


class ImportStrategy(ABC):
    """
    Abstract base class for parse strategies.

    Subclasses declare the MIME types and file extensions (without dot)
    they accept; the registry matches lookup tokens against them.
    """

    mime_types: tuple[str, ...] = ()
    file_extensions: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, data: bytes | str, options: ProcessorOptions) -> list[Record]:
        """
        Convert a raw payload into an ordered list of records.

        Args:
            data: Uploaded payload
            options: Processing options

        Returns:
            Parsed records in input order

        Raises:
            ParseError: If the payload violates the format's grammar
        """

    def accepts(self, token: str) -> bool:
        return token in self.mime_types or token in self.file_extensions

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mime_types={list(self.mime_types)})"


class ExportStrategy(ABC):
    """
    Abstract base class for serialize strategies.
    """

    mime_type: str = ""
    file_extension: str = ""

    @abstractmethod
    def format(self, documents: Sequence[Document], options: ProcessorOptions) -> ExportResult:
        """
        Serialize documents.

        Args:
            documents: Documents in export order
            options: Processing options (exclude_fields is honoured)

        Returns:
            ExportResult with payload, MIME type and suggested filename
        """

    def accepts(self, token: str) -> bool:
        base_mime = self.mime_type.split(";", 1)[0].strip()
        return token in (self.mime_type, base_mime, self.file_extension)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(mime_type={self.mime_type!r})"


def filter_fields(documents: Sequence[Document | Mapping[str, Any]], exclude_fields: Sequence[str]) -> list[dict[str, Any]]:
    """
    Flatten documents and drop excluded fields from each one.

    Args:
        documents: Documents or plain mappings
        exclude_fields: Field names to remove

    Returns:
        New list of filtered dictionaries in input order
    """
    excluded = set(exclude_fields)
    rows = []
    for doc in documents:
        record = doc.to_record() if isinstance(doc, Document) else dict(doc)
        rows.append({key: value for key, value in record.items() if key not in excluded})
    return rows
