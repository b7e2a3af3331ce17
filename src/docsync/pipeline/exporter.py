"""
Export pipeline.

Pages through a collection and hands the accumulated documents to an
export strategy.
"""

import logging

from docsync.core.models import Document, ExportResult, ProcessorOptions
from docsync.formats.base import ExportStrategy
from docsync.observability import metrics
from docsync.observability.logger import get_logger
from docsync.repository.base import DocumentRepository, Pagination, QueryParams


class DataExporter:
    """
    Reads a whole collection page by page and serializes it.

    Fetching stops at the first page shorter than PAGE_SIZE. A failing
    page fetch propagates and aborts the export.
    """

    PAGE_SIZE = 500

    def __init__(self, repository: DocumentRepository, logger: logging.Logger | None = None):
        self.repository = repository
        self.logger = logger or get_logger(__name__)

    def export_data(self, strategy: ExportStrategy, options: ProcessorOptions) -> ExportResult:
        """
        Export ``options.collection`` with the given strategy.

        Args:
            strategy: Serialize strategy
            options: Processing options (collection, locale, exclude_fields)

        Returns:
            ExportResult produced by the strategy
        """
        collection = options.collection

        with metrics.track_duration(metrics.export_duration_seconds, collection=collection):
            documents, pages = self._fetch_all(collection, options.locale)
            result = strategy.format(documents, options)

        metrics.record_export(collection, len(documents), pages)
        self.logger.info(
            f"Exported {len(documents)} documents from {collection}",
            extra={
                "collection": collection,
                "document_count": len(documents),
                "pages": pages,
                "export_filename": result.filename,
            },
        )
        return result

    def _fetch_all(self, collection: str, locale: str | None) -> tuple[list[Document], int]:
        documents: list[Document] = []
        page = 1
        while True:
            params = QueryParams(
                locale=locale,
                pagination=Pagination(page=page, page_size=self.PAGE_SIZE),
            )
            batch = self.repository.find_many(collection, params)
            documents.extend(batch)
            self.logger.debug(
                f"Fetched page {page} of {collection}",
                extra={"collection": collection, "page": page, "batch_size": len(batch)},
            )
            if len(batch) < self.PAGE_SIZE:
                return documents, page
            page += 1
