"""
CSV import/export facade.
"""

from docsync.core.config import SyncSettings
from docsync.core.models import ExportResult, ImportResult, ProcessorOptions
from docsync.formats.base import ExportStrategy, ImportStrategy
from docsync.formats.csv_format import CsvExportStrategy, CsvImportStrategy
from docsync.repository.base import DocumentRepository

from .exporter import DataExporter
from .importer import DataImporter


class CsvIoService:
    """Binds the importer and exporter to one pair of CSV strategies."""

    def __init__(
        self,
        importer: DataImporter,
        exporter: DataExporter,
        import_strategy: ImportStrategy,
        export_strategy: ExportStrategy,
    ):
        self.importer = importer
        self.exporter = exporter
        self.import_strategy = import_strategy
        self.export_strategy = export_strategy

    def import_csv(self, data: bytes | str, options: ProcessorOptions) -> ImportResult:
        return self.importer.import_data(data, self.import_strategy, options)

    def export_csv(self, options: ProcessorOptions) -> ExportResult:
        return self.exporter.export_data(self.export_strategy, options)


def build_csv_service(repository: DocumentRepository, settings: SyncSettings | None = None) -> CsvIoService:
    """
    Wire a repository into a ready CsvIoService.

    Args:
        repository: Document store shared by importer and exporter
        settings: Delimiter and literal fields (defaults when None)

    Returns:
        CsvIoService
    """
    settings = settings or SyncSettings()
    return CsvIoService(
        importer=DataImporter(repository),
        exporter=DataExporter(repository),
        import_strategy=CsvImportStrategy(
            delimiter=settings.csv_delimiter,
            literal_fields=settings.literal_fields,
        ),
        export_strategy=CsvExportStrategy(delimiter=settings.csv_delimiter),
    )
