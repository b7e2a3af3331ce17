"""
In-memory document repository.

Keeps one insertion-ordered map of document id -> document per
collection and applies the same filter, locale and pagination rules as
the production adapter. Used by tests and CLI dry runs.
"""

from datetime import datetime, timezone
from itertools import count
from typing import Any

from docsync.core.errors import RepositoryNotFoundError
from docsync.core.models import Document, strip_reserved

from .base import DocumentRepository, Pagination, QueryParams, equality_value, parse_sort_key


def values_equal(left: Any, right: Any) -> bool:
    """Strict equality: booleans never match numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    return left == right


class InMemoryDocumentRepository(DocumentRepository):
    """
    Dictionary-backed DocumentRepository.
    """

    def __init__(self, id_prefix: str = "doc"):
        """
        Initialize an empty store.

        Args:
            id_prefix: Prefix of generated document ids ("doc-1", "doc-2", ...)
        """
        self.id_prefix = id_prefix
        self._store: dict[str, dict[str, dict[str, Any]]] = {}
        self._ids = count(1)

    # -----------------------
    # DocumentRepository
    # -----------------------

    def find_many(self, collection: str, params: QueryParams | None = None) -> list[Document]:
        params = params or QueryParams()
        docs = list(self._collection(collection).values())

        if params.locale:
            docs = [d for d in docs if d.get("locale") in (params.locale, None)]

        for key, condition in params.filters.items():
            expected = equality_value(condition)
            docs = [d for d in docs if values_equal(d.get(key), expected)]

        # Apply least significant key first; sorted() is stable
        for key in reversed(params.sort):
            field, descending = parse_sort_key(key)
            present = [d for d in docs if d.get(field) is not None]
            missing = [d for d in docs if d.get(field) is None]
            docs = sorted(present, key=lambda d: d[field], reverse=descending) + missing

        if params.pagination:
            start = params.pagination.offset
            docs = docs[start:start + params.pagination.page_size]

        return [Document.model_validate(d) for d in docs]

    def find_first(self, collection: str, params: QueryParams | None = None) -> Document | None:
        params = params or QueryParams()
        first_page = params.model_copy(update={"pagination": Pagination(page=1, page_size=1)})
        results = self.find_many(collection, first_page)
        return results[0] if results else None

    def create(self, collection: str, data: dict[str, Any], locale: str | None = None) -> Document:
        now = datetime.now(timezone.utc)
        document_id = f"{self.id_prefix}-{next(self._ids)}"
        record = {
            "documentId": document_id,
            "createdAt": now,
            "updatedAt": now,
            **strip_reserved(data),
            "locale": locale,
        }
        document = Document.model_validate(record)
        self._collection(collection)[document_id] = record
        return document

    def update(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        locale: str | None = None,
    ) -> Document:
        store = self._collection(collection)
        existing = store.get(document_id)
        if existing is None:
            raise RepositoryNotFoundError(collection, document_id)

        record = {
            **existing,
            **strip_reserved(data),
            "updatedAt": datetime.now(timezone.utc),
            "locale": existing.get("locale") if locale is None else locale,
        }

        document = Document.model_validate(record)
        store[document_id] = record
        return document

    # -----------------------
    # Test helpers
    # -----------------------

    def seed(self, collection: str, docs: list[dict[str, Any]]) -> list[Document]:
        """
        Insert documents verbatim (timestamps included) with generated ids.

        Returns:
            The stored documents
        """
        seeded = []
        for data in docs:
            document_id = f"seeded-{next(self._ids)}"
            record = {"documentId": document_id, **{k: v for k, v in data.items() if k != "documentId"}}
            seeded.append(Document.model_validate(record))
            self._collection(collection)[document_id] = record
        return seeded

    def all_documents(self, collection: str) -> list[Document]:
        return [Document.model_validate(d) for d in self._collection(collection).values()]

    def count(self, collection: str) -> int:
        return len(self._collection(collection))

    def clear(self) -> None:
        self._store.clear()
        self._ids = count(1)

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._store.setdefault(collection, {})