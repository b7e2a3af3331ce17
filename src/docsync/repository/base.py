"""
Document repository interface.

The importer and exporter depend only on this contract; store adapters
implement it. It knows nothing about formats or the boundary layer.
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from docsync.core.models import Document

DEFAULT_PAGE_SIZE = 100


class Pagination(BaseModel):
    """1-based page window."""

    page: int = Field(1, ge=1)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class QueryParams(BaseModel):
    """
    Query parameters accepted by find_many/find_first.

    Attributes:
        filters: Field predicates, either ``{"field": {"$eq": value}}``
                 or the shorthand ``{"field": value}``
        locale: Locale scope; documents with no locale also match
        pagination: Page window (all matches when None)
        sort: Sort keys, ``"field"`` or ``"field:desc"``
    """

    filters: dict[str, Any] = Field(default_factory=dict)
    locale: str | None = None
    pagination: Pagination | None = None
    sort: list[str] = Field(default_factory=list)


def equality_value(condition: Any) -> Any:
    """Extract the comparison value from a filter condition."""
    if isinstance(condition, dict) and "$eq" in condition:
        return condition["$eq"]
    return condition


def parse_sort_key(key: str) -> tuple[str, bool]:
    """
    Split a sort key into (field, descending).
    """
    field, _, direction = key.partition(":")
    direction = direction.strip().lower() or "asc"
    if direction not in ("asc", "desc"):
        raise ValueError(f"Invalid sort direction '{direction}' for '{field}'")
    return field.strip(), direction == "desc"


class DocumentRepository(ABC):
    """
    Abstract document store.

    Every operation is addressed by a collection identifier.
    """

    @abstractmethod
    def find_many(self, collection: str, params: QueryParams | None = None) -> list[Document]:
        """
        Return documents matching all filters, at most one page when
        pagination is given. Ordering is stable across pages.
        """

    @abstractmethod
    def find_first(self, collection: str, params: QueryParams | None = None) -> Document | None:
        """Return the first match, or None."""

    @abstractmethod
    def create(self, collection: str, data: dict[str, Any], locale: str | None = None) -> Document:
        """
        Create a document with a fresh identifier and timestamps.

        Caller-supplied identifier and timestamp fields are discarded.
        """

    @abstractmethod
    def update(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        locale: str | None = None,
    ) -> Document:
        """
        Merge ``data`` onto an existing document.

        Raises:
            RepositoryNotFoundError: If ``document_id`` is unknown in ``collection``
        """
