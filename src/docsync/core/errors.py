"""
Exception hierarchy for docsync.

Parse and store failures are raised here and turned into value-level
results by the importer; only export-time store failures propagate
to the caller.
"""

from typing import Any


class DocSyncError(Exception):
    """Base class for all docsync errors."""


class ParseError(DocSyncError):
    """Raised when an input payload violates its format's grammar."""

    def __init__(self, message: str, line: int | None = None):
        self.message = message
        self.line = line
        if line is not None:
            super().__init__(f"{message} (line {line})")
        else:
            super().__init__(message)


class RepositoryNotFoundError(DocSyncError):
    """Raised when an update targets a document id the store does not know."""

    def __init__(self, collection: str, document_id: str):
        self.collection = collection
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id} in {collection}")


class StoreError(DocSyncError):
    """Raised on transport or connectivity failures of the backing store."""


class ConfigError(DocSyncError):
    """Raised when a settings file is malformed."""


class RequestValidationError(DocSyncError):
    """
    Raised by the boundary layer before the core is invoked.

    Attributes:
        message: Human readable reason
        details: Extra context (allowed values, limits, ...)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)
