"""
Import reconciliation pipeline.

Coordinates the flow: parse → sanitize → decide create/update → write,
one record at a time.
"""

import logging

from docsync.core.models import ImportResult, ImportRowError, ProcessorOptions, Record, strip_reserved
from docsync.formats.base import ImportStrategy
from docsync.observability import metrics
from docsync.observability.logger import get_logger
from docsync.repository.base import QueryParams, DocumentRepository


class DataImporter:
    """
    Reconciles parsed records against a document collection.

    Flow:
    1. Parse the raw payload with the given strategy; a parse failure
       ends the call with a single row=-1 error
    2. For each record, strip store-managed fields
    3. Create, or update the document whose ``id_field`` matches
    4. Record a failing row and carry on with the next one
    """

    def __init__(self, repository: DocumentRepository, logger: logging.Logger | None = None):
        """
        Initialize importer.

        Args:
            repository: Document store
            logger: Diagnostic sink (module logger by default)
        """
        self.repository = repository
        self.logger = logger or get_logger(__name__)

    def import_data(
        self,
        data: bytes | str,
        strategy: ImportStrategy,
        options: ProcessorOptions,
    ) -> ImportResult:
        """
        Import a raw payload into ``options.collection``.

        Args:
            data: Raw uploaded payload
            strategy: Parse strategy for the payload's format
            options: Processing options

        Returns:
            ImportResult with per-outcome counters and row errors
        """
        collection = options.collection

        try:
            records = strategy.parse(data, options)
        except Exception as e:
            self.logger.error(
                f"Failed to parse input for {collection}: {e}",
                extra={"collection": collection, "strategy": type(strategy).__name__},
            )
            metrics.record_parse_failure(collection)
            return ImportResult.from_parse_failure(f"Failed to parse input: {e}")

        self.logger.info(
            f"Importing {len(records)} records into {collection}",
            extra={"collection": collection, "record_count": len(records), "id_field": options.id_field},
        )

        result = ImportResult()
        with metrics.track_duration(metrics.import_duration_seconds, collection=collection):
            for row, record in enumerate(records):
                try:
                    self._process_record(record, options, result)
                except Exception as e:
                    result.failed += 1
                    result.errors.append(
                        ImportRowError(row=row, field=getattr(e, "field_name", None), message=str(e))
                    )
                    self.logger.warning(
                        f"Row {row} failed: {e}",
                        extra={"collection": collection, "row": row, "error_type": type(e).__name__},
                    )

        metrics.record_import_result(
            collection, result.created, result.updated, result.skipped, result.failed
        )
        self.logger.info(
            f"Import into {collection} complete",
            extra={
                "collection": collection,
                "created_count": result.created,
                "updated_count": result.updated,
                "skipped_count": result.skipped,
                "failed_count": result.failed,
            },
        )
        return result

    def _process_record(self, record: Record, options: ProcessorOptions, result: ImportResult) -> None:
        collection, locale, id_field = options.collection, options.locale, options.id_field
        payload = strip_reserved(record)

        id_value = record.get(id_field) if id_field else None
        if id_value is None or id_value == "":
            self.repository.create(collection, payload, locale)
            result.created += 1
            return

        existing = self.repository.find_first(
            collection,
            QueryParams(filters={id_field: {"$eq": id_value}}, locale=locale),
        )
        if existing is not None:
            self.repository.update(collection, existing.document_id, payload, locale)
            result.updated += 1
        else:
            self.repository.create(collection, payload, locale)
            result.created += 1
