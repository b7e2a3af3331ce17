"""
Unit tests for pipeline logging through the configured JSON logger.
"""

import io
import json

import pytest

from docsync.core.models import ProcessorOptions
from docsync.formats import CsvExportStrategy, CsvImportStrategy
from docsync.observability.logger import DEFAULT_LOGGER_NAME, setup_logger
from docsync.pipeline import DataExporter, DataImporter, build_csv_service

COLLECTION = "api::article.article"


@pytest.fixture
def json_log_stream():
    """Route the package logger to an in-memory stream as JSON lines"""
    logger = setup_logger(DEFAULT_LOGGER_NAME, level="DEBUG", format_type="json")
    stream = io.StringIO()
    logger.handlers[0].setStream(stream)
    yield stream
    setup_logger(DEFAULT_LOGGER_NAME)


def log_lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


@pytest.mark.unit
class TestPipelineLogging:
    """Tests that pipeline log calls are accepted by the JSON formatter"""

    def test_import_completion_carries_counters(self, repository, json_log_stream):
        importer = DataImporter(repository)

        result = importer.import_data(
            b"title,slug\nA,a\nB,b",
            CsvImportStrategy(),
            ProcessorOptions(collection=COLLECTION),
        )

        assert result.created == 2
        completion = [r for r in log_lines(json_log_stream) if r["message"].endswith("complete")]
        assert len(completion) == 1
        assert completion[0]["created_count"] == 2
        assert completion[0]["failed_count"] == 0
        assert completion[0]["collection"] == COLLECTION

    def test_parse_failure_is_logged_as_json(self, repository, json_log_stream):
        importer = DataImporter(repository)

        importer.import_data(b'title\n"open', CsvImportStrategy(), ProcessorOptions(collection=COLLECTION))

        errors = [r for r in log_lines(json_log_stream) if r["level"] == "ERROR"]
        assert errors[0]["strategy"] == "CsvImportStrategy"

    def test_export_logs_pages_and_filename(self, repository, json_log_stream):
        repository.create(COLLECTION, {"title": "A"})
        exporter = DataExporter(repository)

        result = exporter.export_data(CsvExportStrategy(), ProcessorOptions(collection=COLLECTION))

        records = log_lines(json_log_stream)
        pages = [r for r in records if "batch_size" in r]
        assert pages[0]["page"] == 1
        assert records[-1]["document_count"] == 1
        assert records[-1]["export_filename"] == result.filename

    def test_built_service_imports_with_default_loggers(self, repository, json_log_stream):
        service = build_csv_service(repository)
        options = ProcessorOptions(collection=COLLECTION, id_field="slug")

        service.import_csv(b"title,slug\nA,a", options)
        second = service.import_csv(b"title,slug\nA2,a", options)

        assert (second.created, second.updated) == (0, 1)
        assert any(r.get("updated_count") == 1 for r in log_lines(json_log_stream))
