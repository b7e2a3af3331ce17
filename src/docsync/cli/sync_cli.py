"""
Command-line interface for CSV import and export.

Usage:
    docsync import --collection <collection> --input <file_path> [options]
    docsync export --collection <collection> [--output <dir>] [options]
"""

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from docsync.core.config import SyncSettings, load_settings
from docsync.core.errors import ConfigError, RequestValidationError
from docsync.core.models import ImportResult, ProcessorOptions
from docsync.formats.csv_format import CsvImportStrategy
from docsync.formats.registry import default_registry
from docsync.observability import metrics
from docsync.observability.logger import get_logger, log_operation, setup_logger
from docsync.pipeline.service import CsvIoService, build_csv_service
from docsync.repository.connection import DatabaseConnectionPool
from docsync.repository.memory import InMemoryDocumentRepository
from docsync.repository.postgres import PostgresDocumentRepository

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID = 2
EXIT_PARTIAL = 3

logger = get_logger(__name__)


def format_import_response(result: ImportResult) -> dict:
    """
    Shape an ImportResult as the import response body.

    Errors are included only when at least one record failed.
    """
    body: dict = {
        "data": {
            "created": result.created,
            "updated": result.updated,
            "skipped": result.skipped,
            "failed": result.failed,
        },
        "meta": {"total": result.total},
    }
    if result.has_errors:
        body["errors"] = [e.model_dump() for e in result.errors]
    return body


def validate_import_request(args, settings: SyncSettings) -> bytes:
    """
    Check an import request and read its payload.

    Returns:
        Raw file contents

    Raises:
        RequestValidationError: On a missing collection or file, a non-CSV
            file, or an oversize payload
    """
    if not args.collection or not args.collection.strip():
        raise RequestValidationError("Collection is required")

    input_path = Path(args.input)
    if not input_path.is_file():
        raise RequestValidationError("No file uploaded", details={"input": str(input_path)})

    extension = input_path.suffix.lstrip(".")
    strategy = default_registry(settings.csv_delimiter, settings.literal_fields).resolve_import(extension)
    if not isinstance(strategy, CsvImportStrategy):
        raise RequestValidationError(
            "Only CSV files are allowed",
            details={"input": str(input_path), "extension": extension},
        )

    size = input_path.stat().st_size
    if size > settings.max_upload_bytes:
        raise RequestValidationError(
            f"File exceeds the {settings.max_upload_bytes} byte limit",
            details={"input": str(input_path), "size": size},
        )

    return input_path.read_bytes()


def import_command(args, service: CsvIoService | None = None, settings: SyncSettings | None = None) -> int:
    """
    Execute the import command.

    Args:
        args: Command-line arguments
        service: Prebuilt service (built from settings when None)
        settings: Loaded settings

    Returns:
        Process exit code
    """
    settings = settings or load_settings(args.config)

    try:
        payload = validate_import_request(args, settings)
    except RequestValidationError as e:
        logger.error(f"Invalid import request: {e.message}", extra={"details": e.details})
        print(json.dumps({"error": {"message": e.message, "details": e.details}}), file=sys.stderr)
        return EXIT_INVALID

    options = ProcessorOptions(
        collection=args.collection,
        locale=args.locale,
        id_field=args.id_field,
    )
    with _service_scope(args, settings, service) as active:
        with log_operation("CSV import", logger=logger, collection=args.collection):
            result = active.import_csv(payload, options)

    print(json.dumps(format_import_response(result), indent=2))
    return EXIT_PARTIAL if result.has_errors else EXIT_OK


def export_command(args, service: CsvIoService | None = None, settings: SyncSettings | None = None) -> int:
    """
    Execute the export command.

    Args:
        args: Command-line arguments
        service: Prebuilt service (built from settings when None)
        settings: Loaded settings

    Returns:
        Process exit code
    """
    settings = settings or load_settings(args.config)

    if not args.collection or not args.collection.strip():
        logger.error("Invalid export request: Collection is required")
        return EXIT_INVALID

    if args.exclude_fields is None:
        exclude_fields = list(settings.default_exclude_fields)
    else:
        exclude_fields = [f.strip() for f in args.exclude_fields.split(",") if f.strip()]

    options = ProcessorOptions(
        collection=args.collection,
        locale=args.locale,
        exclude_fields=exclude_fields,
    )

    with _service_scope(args, settings, service) as active:
        with log_operation("CSV export", logger=logger, collection=args.collection):
            result = active.export_csv(options)

    data = result.data.encode("utf-8") if isinstance(result.data, str) else result.data
    if args.output:
        output_dir = Path(args.output)
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / result.filename
        target.write_bytes(data)
        logger.info(f"Export written to {target}", extra={"collection": args.collection, "bytes": len(data)})
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    return EXIT_OK


def write_metrics(path: str) -> None:
    """Write the metrics registry in Prometheus text format."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(metrics.generate_metrics())


class _service_scope:
    """
    Yields the caller's service, or builds one for the duration of a command.

    Dry runs use an empty in-memory store; otherwise a connection pool
    is opened against PostgreSQL and closed on exit.
    """

    def __init__(self, args, settings: SyncSettings, service: CsvIoService | None):
        self.args = args
        self.settings = settings
        self.service = service
        self.pool: DatabaseConnectionPool | None = None

    def __enter__(self) -> CsvIoService:
        if self.service is not None:
            return self.service

        if self.args.dry_run:
            logger.info("DRY RUN MODE: using an empty in-memory store")
            return build_csv_service(InMemoryDocumentRepository(), self.settings)

        self.pool = DatabaseConnectionPool(self.settings.database)
        self.pool.open()
        repository = PostgresDocumentRepository(self.pool, table=self.settings.database.table)
        try:
            repository.ensure_schema()
        except Exception:
            self.__exit__(None, None, None)
            raise
        return build_csv_service(repository, self.settings)

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.pool is not None:
            self.pool.close()
            self.pool = None
        return False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsync",
        description="Import CSV files into a document collection and export collections to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upsert products keyed by sku
  docsync import --collection api::product.product --input data/products.csv --id-field sku

  # Validate a file without touching the database
  docsync import --collection api::product.product --input data/products.csv --dry-run

  # Export a locale to a directory, dropping timestamps
  docsync export --collection api::product.product --locale en \\
      --exclude-fields createdAt,updatedAt --output exports/
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    import_parser = subparsers.add_parser("import", help="Import a CSV file into a collection")
    import_parser.add_argument("--collection", required=True, help="Target collection identifier")
    import_parser.add_argument("--input", required=True, help="Path to CSV file")
    import_parser.add_argument(
        "--locale",
        help="Locale for created documents; matching also considers documents without a locale",
    )
    import_parser.add_argument("--id-field", help="Record field used to match existing documents")

    export_parser = subparsers.add_parser("export", help="Export a collection to CSV")
    export_parser.add_argument("--collection", required=True, help="Source collection identifier")
    export_parser.add_argument(
        "--locale",
        help="Only export documents in this locale or without a locale",
    )
    export_parser.add_argument(
        "--exclude-fields",
        help="Comma-separated fields to omit (default: settings default_exclude_fields)",
    )
    export_parser.add_argument("--output", help="Directory for the export file (default: stdout)")

    for sub in (import_parser, export_parser):
        sub.add_argument("--config", help="Path to settings YAML file")
        sub.add_argument("--metrics-file", help="Write Prometheus metrics to this file when done")
        sub.add_argument(
            "--dry-run",
            action="store_true",
            help="Use an empty in-memory store instead of the database",
        )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ConfigError) as e:
        logger.error(f"Failed to load settings: {e}")
        sys.exit(EXIT_INVALID)

    setup_logger(level=settings.log_level, format_type=settings.log_format)

    commands = {"import": import_command, "export": export_command}
    try:
        exit_code = commands[args.command](args, settings=settings)
    except Exception as e:
        logger.error(f"Error during {args.command}: {e}", exc_info=True)
        exit_code = EXIT_ERROR

    if args.metrics_file:
        try:
            write_metrics(args.metrics_file)
        except OSError as e:
            logger.error(f"Failed to write metrics to {args.metrics_file}: {e}")

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
