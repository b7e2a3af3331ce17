"""
Pytest configuration and fixtures for docsync tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
from datetime import datetime, timezone
from typing import Generator
from unittest.mock import MagicMock

import pytest

from docsync.core.models import ProcessorOptions
from docsync.formats import CsvExportStrategy, CsvImportStrategy
from docsync.pipeline import CsvIoService, DataExporter, DataImporter
from docsync.repository import InMemoryDocumentRepository

COLLECTION = "api::product.product"
FIXED_NOW = datetime(2025, 11, 17, 9, 30, 15, 123000, tzinfo=timezone.utc)


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that require Docker containers"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests through the command-line interface"
    )


# =======================
# CORE FIXTURES
# =======================

@pytest.fixture
def repository() -> InMemoryDocumentRepository:
    """Empty in-memory document store"""
    return InMemoryDocumentRepository()


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double; docsync loggers do not propagate to caplog"""
    return MagicMock()


@pytest.fixture
def importer(repository, mock_logger) -> DataImporter:
    return DataImporter(repository, logger=mock_logger)


@pytest.fixture
def exporter(repository, mock_logger) -> DataExporter:
    return DataExporter(repository, logger=mock_logger)


@pytest.fixture
def csv_import_strategy() -> CsvImportStrategy:
    return CsvImportStrategy()


@pytest.fixture
def csv_export_strategy() -> CsvExportStrategy:
    """CSV export strategy with a frozen clock"""
    return CsvExportStrategy(clock=lambda: FIXED_NOW)


@pytest.fixture
def service(importer, exporter, csv_import_strategy, csv_export_strategy) -> CsvIoService:
    return CsvIoService(importer, exporter, csv_import_strategy, csv_export_strategy)


@pytest.fixture
def options() -> ProcessorOptions:
    return ProcessorOptions(collection=COLLECTION)


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator:
    """
    Start PostgreSQL container for integration tests

    Skips when Docker is not reachable.

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_docsync",
        password="test_password",
        dbname="test_documents",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="function")
def db_settings(postgres_container):
    """DatabaseSettings pointing at the test container"""
    from docsync.core.config import DatabaseSettings

    return DatabaseSettings(
        host=postgres_container.get_container_host_ip(),
        port=int(postgres_container.get_exposed_port(5432)),
        name="test_documents",
        user="test_docsync",
        password="test_password",
    )


@pytest.fixture(scope="function")
def pg_repository(db_settings):
    """
    PostgresDocumentRepository on a freshly truncated table

    Yields:
        PostgresDocumentRepository with its pool open
    """
    from docsync.repository import DatabaseConnectionPool, PostgresDocumentRepository

    pool = DatabaseConnectionPool(db_settings)
    pool.open()
    repository = PostgresDocumentRepository(pool)
    repository.ensure_schema()
    pool.execute_command("TRUNCATE TABLE documents")

    yield repository

    pool.close()

