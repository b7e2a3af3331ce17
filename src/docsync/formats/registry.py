"""
Strategy registry for resolving formats by MIME type or file extension.
"""

from .base import ExportStrategy, ImportStrategy
from .csv_format import CsvExportStrategy, CsvImportStrategy
from .json_format import JsonExportStrategy, JsonImportStrategy


class StrategyRegistry:
    """
    Ordered registry of import and export strategies.

    Resolution returns the first registered strategy that declares the
    token, so a later registration never shadows an earlier one.
    """

    def __init__(self):
        self.import_strategies: list[ImportStrategy] = []
        self.export_strategies: list[ExportStrategy] = []

    def register_import(self, strategy: ImportStrategy) -> "StrategyRegistry":
        self.import_strategies.append(strategy)
        return self

    def register_export(self, strategy: ExportStrategy) -> "StrategyRegistry":
        self.export_strategies.append(strategy)
        return self

    def resolve_import(self, token: str) -> ImportStrategy | None:
        """
        Resolve an import strategy.

        Args:
            token: MIME type or file extension (case-insensitive)

        Returns:
            First matching strategy, or None
        """
        normalized = self._normalize(token)
        return next((s for s in self.import_strategies if s.accepts(normalized)), None)

    def resolve_export(self, token: str) -> ExportStrategy | None:
        """
        Resolve an export strategy.

        Args:
            token: MIME type (parameters optional) or file extension

        Returns:
            First matching strategy, or None
        """
        normalized = self._normalize(token)
        return next((s for s in self.export_strategies if s.accepts(normalized)), None)

    @staticmethod
    def _normalize(token: str) -> str:
        return token.strip().lower()


def default_registry(
    delimiter: str = ",",
    literal_fields: tuple[str, ...] | list[str] = (),
) -> StrategyRegistry:
    """
    Build a registry with the bundled formats, CSV first.

    Args:
        delimiter: CSV field delimiter
        literal_fields: Fields the CSV parser never casts

    Returns:
        Populated StrategyRegistry
    """
    registry = StrategyRegistry()
    registry.register_import(CsvImportStrategy(delimiter=delimiter, literal_fields=literal_fields))
    registry.register_import(JsonImportStrategy())
    registry.register_export(CsvExportStrategy(delimiter=delimiter))
    registry.register_export(JsonExportStrategy())
    return registry
