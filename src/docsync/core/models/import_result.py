"""
ImportResult model summarizing a reconciliation run (ephemeral).
"""

from pydantic import BaseModel, Field

# Row index reported when the whole payload failed to parse
PARSE_FAILURE_ROW = -1


class ImportRowError(BaseModel):
    """
    A single failed row.

    Attributes:
        row: 0-indexed position in the parsed record sequence (header
             excluded), or -1 when the input could not be parsed
        field: Offending field, when the failure names one
        message: Failure cause
    """

    row: int = Field(..., ge=PARSE_FAILURE_ROW)
    field: str | None = None
    message: str


class ImportResult(BaseModel):
    """
    Aggregate outcome of one import call.

    The importer threads a single instance through the record loop and
    increments the counters in place.
    """

    created: int = Field(0, ge=0)
    updated: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    errors: list[ImportRowError] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.created + self.updated + self.skipped + self.failed

    @property
    def has_errors(self) -> bool:
        return self.failed > 0

    @property
    def parse_failed(self) -> bool:
        return any(e.row == PARSE_FAILURE_ROW for e in self.errors)

    @classmethod
    def from_parse_failure(cls, message: str) -> "ImportResult":
        return cls(failed=1, errors=[ImportRowError(row=PARSE_FAILURE_ROW, message=message)])
