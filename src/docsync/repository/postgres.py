"""
PostgreSQL document repository.

Stores every collection in a single JSONB table keyed by
(collection, document_id). Record fields live in ``data``; identifier,
locale and timestamps are real columns.
"""

import uuid
from typing import Any

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from docsync.core.errors import RepositoryNotFoundError, StoreError
from docsync.core.models import Document, strip_reserved

from .base import DocumentRepository, Pagination, QueryParams, equality_value, parse_sort_key
from .connection import DatabaseConnectionPool

# Wire field name -> column for metadata stored outside ``data``
METADATA_COLUMNS = {
    "documentId": "document_id",
    "locale": "locale",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "publishedAt": "published_at",
}

_RETURNING = sql.SQL("document_id, locale, data, created_at, updated_at, published_at")


class PostgresDocumentRepository(DocumentRepository):
    """
    DocumentRepository backed by a PostgreSQL JSONB table.

    Equality filters on record fields use JSONB containment, so a value
    matches only a stored value of the same JSON type.
    """

    def __init__(self, pool: DatabaseConnectionPool, table: str = "documents"):
        """
        Initialize repository.

        Args:
            pool: Open database connection pool
            table: Documents table name
        """
        self.pool = pool
        self.table = sql.Identifier(table)
        self.table_name = table

    def ensure_schema(self) -> None:
        """Create the documents table and its indexes if missing."""
        self._command(
            sql.SQL(
                """
                CREATE TABLE IF NOT EXISTS {table} (
                    seq BIGSERIAL,
                    collection TEXT NOT NULL,
                    document_id TEXT NOT NULL,
                    locale TEXT,
                    data JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                    published_at TIMESTAMPTZ,
                    PRIMARY KEY (collection, document_id)
                )
                """
            ).format(table=self.table)
        )
        self._command(
            sql.SQL("CREATE INDEX IF NOT EXISTS {index} ON {table} USING GIN (data)").format(
                index=sql.Identifier(f"{self.table_name}_data_gin"),
                table=self.table,
            )
        )

    def find_many(self, collection: str, params: QueryParams | None = None) -> list[Document]:
        params = params or QueryParams()
        conditions = [sql.SQL("collection = %s")]
        values: list[Any] = [collection]

        if params.locale:
            conditions.append(sql.SQL("(locale = %s OR locale IS NULL)"))
            values.append(params.locale)

        containment: dict[str, Any] = {}
        for key, condition in params.filters.items():
            expected = equality_value(condition)
            column = METADATA_COLUMNS.get(key)
            if column is None:
                containment[key] = expected
            elif expected is None:
                conditions.append(sql.SQL("{} IS NULL").format(sql.Identifier(column)))
            else:
                conditions.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
                values.append(expected)
        if containment:
            conditions.append(sql.SQL("data @> %s"))
            values.append(Jsonb(containment))

        order_by = []
        for key in params.sort:
            field, descending = parse_sort_key(key)
            direction = sql.SQL("DESC") if descending else sql.SQL("ASC")
            column = METADATA_COLUMNS.get(field)
            if column is not None:
                target = sql.Identifier(column)
            else:
                target = sql.SQL("data -> %s")
                values.append(field)
            order_by.append(sql.SQL("{} {} NULLS LAST").format(target, direction))
        # Insertion order keeps pagination stable
        order_by.append(sql.SQL("seq ASC"))

        query = sql.SQL("SELECT {returning} FROM {table} WHERE {where} ORDER BY {order}").format(
            returning=_RETURNING,
            table=self.table,
            where=sql.SQL(" AND ").join(conditions),
            order=sql.SQL(", ").join(order_by),
        )
        if params.pagination:
            query = query + sql.SQL(" LIMIT %s OFFSET %s")
            values.extend([params.pagination.page_size, params.pagination.offset])

        return [self._to_document(row) for row in self._query(query, values)]

    def find_first(self, collection: str, params: QueryParams | None = None) -> Document | None:
        params = params or QueryParams()
        results = self.find_many(
            collection,
            params.model_copy(update={"pagination": Pagination(page=1, page_size=1)}),
        )
        return results[0] if results else None

    def create(self, collection: str, data: dict[str, Any], locale: str | None = None) -> Document:
        query = sql.SQL(
            "INSERT INTO {table} (collection, document_id, locale, data) "
            "VALUES (%s, %s, %s, %s) RETURNING {returning}"
        ).format(table=self.table, returning=_RETURNING)
        rows = self._query(query, [collection, uuid.uuid4().hex, locale, Jsonb(strip_reserved(data))])
        return self._to_document(rows[0])

    def update(
        self,
        collection: str,
        document_id: str,
        data: dict[str, Any],
        locale: str | None = None,
    ) -> Document:
        assignments = [sql.SQL("data = data || %s"), sql.SQL("updated_at = now()")]
        values: list[Any] = [Jsonb(strip_reserved(data))]
        if locale is not None:
            assignments.append(sql.SQL("locale = %s"))
            values.append(locale)
        values.extend([collection, document_id])

        query = sql.SQL(
            "UPDATE {table} SET {assignments} "
            "WHERE collection = %s AND document_id = %s RETURNING {returning}"
        ).format(
            table=self.table,
            assignments=sql.SQL(", ").join(assignments),
            returning=_RETURNING,
        )
        rows = self._query(query, values)
        if not rows:
            raise RepositoryNotFoundError(collection, document_id)
        return self._to_document(rows[0])

    def _query(self, query: sql.Composable, values: list[Any]) -> list[dict]:
        try:
            return self.pool.execute_query(query, values)
        except psycopg.Error as e:
            raise StoreError(f"Document store query failed: {e}") from e

    def _command(self, command: sql.Composable) -> None:
        try:
            self.pool.execute_command(command)
        except psycopg.Error as e:
            raise StoreError(f"Document store command failed: {e}") from e

    @staticmethod
    def _to_document(row: dict[str, Any]) -> Document:
        # Columns win over same-named keys inside data
        record: dict[str, Any] = dict(row.get("data") or {})
        record.update(
            documentId=row["document_id"],
            createdAt=row["created_at"],
            updatedAt=row["updated_at"],
            locale=row["locale"],
        )
        if row.get("published_at") is not None:
            record["publishedAt"] = row["published_at"]
        return Document.model_validate(record)