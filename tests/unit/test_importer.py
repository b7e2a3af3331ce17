"""
Unit tests for the import reconciliation pipeline.

Includes property-based testing with hypothesis for failure isolation.
"""

from unittest.mock import MagicMock, patch

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from docsync.core.errors import StoreError
from docsync.core.models import PARSE_FAILURE_ROW, ProcessorOptions
from docsync.formats import CsvImportStrategy, JsonImportStrategy
from docsync.pipeline import DataImporter
from docsync.repository import InMemoryDocumentRepository, QueryParams

COLLECTION = "api::product.product"


class FieldRejected(Exception):
    """Store-side validation error that names its field."""

    def __init__(self, field_name: str, message: str):
        self.field_name = field_name
        super().__init__(message)


@pytest.mark.unit
class TestImportCreateAndUpdate:
    """Tests for the create/update decision"""

    def test_without_id_field_every_record_is_created(self, importer, repository, csv_import_strategy):
        data = b"title,price\nWidget,9.99\nGadget,12\n"

        result = importer.import_data(data, csv_import_strategy, ProcessorOptions(collection=COLLECTION))

        assert (result.created, result.updated, result.skipped, result.failed) == (2, 0, 0, 0)
        assert result.errors == []
        assert repository.count(COLLECTION) == 2

    def test_upsert_updates_matching_document(self, importer, repository, csv_import_strategy):
        """Test the documented upsert scenario keyed by sku"""
        repository.seed(COLLECTION, [{"sku": "A1", "name": "Old"}])
        options = ProcessorOptions(collection=COLLECTION, id_field="sku")
        data = b"sku,name\nA1,New\nB2,Other\n"

        result = importer.import_data(data, csv_import_strategy, options)

        assert (result.created, result.updated, result.failed) == (1, 1, 0)
        docs = {d.get("sku"): d for d in repository.all_documents(COLLECTION)}
        assert docs["A1"].get("name") == "New"
        assert docs["B2"].get("name") == "Other"
        assert repository.count(COLLECTION) == 2

    def test_reimport_is_idempotent(self, importer, repository, csv_import_strategy):
        options = ProcessorOptions(collection=COLLECTION, id_field="sku")
        data = b"sku,name\nA1,Widget\nB2,Gadget\n"

        first = importer.import_data(data, csv_import_strategy, options)
        second = importer.import_data(data, csv_import_strategy, options)

        assert (first.created, first.updated) == (2, 0)
        assert (second.created, second.updated) == (0, 2)
        assert repository.count(COLLECTION) == 2

    def test_blank_key_value_creates(self, importer, repository, csv_import_strategy):
        repository.seed(COLLECTION, [{"sku": "", "name": "Existing"}])
        options = ProcessorOptions(collection=COLLECTION, id_field="sku")

        result = importer.import_data(b"sku,name\n,New\n", csv_import_strategy, options)

        assert (result.created, result.updated) == (1, 0)
        assert repository.count(COLLECTION) == 2

    def test_missing_key_column_creates(self, importer, repository, csv_import_strategy):
        options = ProcessorOptions(collection=COLLECTION, id_field="sku")

        result = importer.import_data(b"name\nWidget\n", csv_import_strategy, options)

        assert result.created == 1

    def test_reserved_fields_are_not_written(self, importer, repository, csv_import_strategy):
        data = b"documentId,createdAt,title\nforged,1999-01-01,Widget\n"

        importer.import_data(data, csv_import_strategy, ProcessorOptions(collection=COLLECTION))

        doc = repository.all_documents(COLLECTION)[0]
        assert doc.document_id != "forged"
        assert doc.payload == {"title": "Widget"}

    def test_document_id_as_key_targets_existing_document(self, importer, repository, csv_import_strategy):
        """Test that the unsanitized key value is used for lookup"""
        existing = repository.create(COLLECTION, {"title": "Old"})
        options = ProcessorOptions(collection=COLLECTION, id_field="documentId")
        data = f"documentId,title\n{existing.document_id},New\n".encode()

        result = importer.import_data(data, csv_import_strategy, options)

        assert result.updated == 1
        assert repository.all_documents(COLLECTION)[0].get("title") == "New"

    def test_lookup_is_scoped_to_locale(self, importer, repository, csv_import_strategy):
        repository.create(COLLECTION, {"sku": "A1", "name": "French"}, locale="fr")
        options = ProcessorOptions(collection=COLLECTION, id_field="sku", locale="en")

        result = importer.import_data(b"sku,name\nA1,English\n", csv_import_strategy, options)

        assert (result.created, result.updated) == (1, 0)
        created = repository.find_many(COLLECTION, QueryParams(filters={"name": "English"}))[0]
        assert created.locale == "en"

    def test_numeric_key_matches_numeric_value(self, importer, repository, csv_import_strategy):
        repository.seed(COLLECTION, [{"code": 42, "name": "Old"}])
        options = ProcessorOptions(collection=COLLECTION, id_field="code")

        result = importer.import_data(b"code,name\n42,New\n", csv_import_strategy, options)

        assert result.updated == 1

    def test_format_agnostic(self, importer, repository):
        data = b'[{"sku": "A1", "tags": ["x", "y"]}]'

        result = importer.import_data(data, JsonImportStrategy(), ProcessorOptions(collection=COLLECTION))

        assert result.created == 1
        assert repository.all_documents(COLLECTION)[0].get("tags") == ["x", "y"]


@pytest.mark.unit
class TestImportFailures:
    """Tests for parse failures and per-record failure isolation"""

    def test_parse_failure_short_circuits(self, importer, repository, csv_import_strategy):
        data = b'title,price\n"Widget,1\n'

        result = importer.import_data(data, csv_import_strategy, ProcessorOptions(collection=COLLECTION))

        assert (result.created, result.updated, result.skipped, result.failed) == (0, 0, 0, 1)
        assert len(result.errors) == 1
        assert result.errors[0].row == PARSE_FAILURE_ROW
        assert result.errors[0].message.startswith("Failed to parse input: ")
        assert repository.count(COLLECTION) == 0

    def test_parse_failure_is_logged(self, importer, mock_logger, csv_import_strategy):
        importer.import_data(b"a,b\n1\n", csv_import_strategy, ProcessorOptions(collection=COLLECTION))

        mock_logger.error.assert_called_once()

    def test_failing_record_does_not_stop_others(self, repository, mock_logger, csv_import_strategy):
        """Test the documented partial-failure scenario"""
        original_create = repository.create

        def create(collection, data, locale=None):
            if data.get("title") == "bad":
                raise StoreError("write rejected")
            return original_create(collection, data, locale)

        importer = DataImporter(repository, logger=mock_logger)
        data = b"title\nok1\nbad\nok2\n"

        with patch.object(repository, "create", side_effect=create):
            result = importer.import_data(data, csv_import_strategy, ProcessorOptions(collection=COLLECTION))

        assert (result.created, result.failed) == (2, 1)
        assert len(result.errors) == 1
        assert result.errors[0].row == 1
        assert result.errors[0].message == "write rejected"
        assert result.errors[0].field is None
        assert mock_logger.warning.call_count == 1

    def test_error_names_field_when_exception_does(self, importer, repository, csv_import_strategy):
        with patch.object(repository, "create", side_effect=FieldRejected("price", "must be positive")):
            result = importer.import_data(b"price\n-1\n", csv_import_strategy, ProcessorOptions(collection=COLLECTION))

        assert result.errors[0].field == "price"
        assert result.errors[0].message == "must be positive"

    def test_lookup_failure_is_a_row_error(self, importer, repository, csv_import_strategy):
        options = ProcessorOptions(collection=COLLECTION, id_field="sku")

        with patch.object(repository, "find_first", side_effect=StoreError("timeout")):
            result = importer.import_data(b"sku\nA1\nB2\n", csv_import_strategy, options)

        assert result.failed == 2
        assert [e.row for e in result.errors] == [0, 1]

    def test_unexpected_parser_exception_is_a_parse_failure(self, importer):
        strategy = MagicMock()
        strategy.parse.side_effect = RuntimeError("boom")

        result = importer.import_data(b"", strategy, ProcessorOptions(collection=COLLECTION))

        assert result.errors[0].row == PARSE_FAILURE_ROW
        assert result.errors[0].message == "Failed to parse input: boom"

    @settings(max_examples=50, deadline=None)
    @given(st.lists(st.booleans(), max_size=30))
    def test_counters_account_for_every_record(self, failures):
        """Property: created + failed == records, and errors list exactly the failing rows"""
        repository = InMemoryDocumentRepository()
        importer = DataImporter(repository, logger=MagicMock())
        original_create = repository.create

        def create(collection, data, locale=None):
            if data["fail"] == 1:
                raise StoreError("rejected")
            return original_create(collection, data, locale)

        rows = "".join(f"{i},{int(fail)}\n" for i, fail in enumerate(failures))
        data = f"n,fail\n{rows}".encode()

        with patch.object(repository, "create", side_effect=create):
            result = importer.import_data(data, CsvImportStrategy(), ProcessorOptions(collection=COLLECTION))

        expected_rows = [i for i, fail in enumerate(failures) if fail]
        assert result.created + result.failed == len(failures)
        assert result.failed == len(expected_rows)
        assert [e.row for e in result.errors] == expected_rows
        assert repository.count(COLLECTION) == len(failures) - len(expected_rows)
