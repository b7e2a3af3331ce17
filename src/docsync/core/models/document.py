"""
Document model representing a persisted record owned by the repository.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Store-managed keys that clients must never supply
RESERVED_FIELDS = frozenset({"documentId", "createdAt", "updatedAt", "publishedAt"})


class Document(BaseModel):
    """
    A persisted record plus its store-assigned metadata.

    The record payload lives in the model's extra fields, so a document
    behaves like the flat mapping the store returns.

    Attributes:
        document_id: Immutable identifier assigned by the repository
        created_at: Creation timestamp
        updated_at: Last update timestamp
        published_at: Publication timestamp (None for drafts)
        locale: Locale tag of this document version
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        json_schema_extra={
            "example": {
                "documentId": "doc-1",
                "createdAt": "2025-11-17T09:30:00Z",
                "updatedAt": "2025-11-17T09:30:00Z",
                "locale": "en",
                "title": "Hello",
                "slug": "hello",
            }
        },
    )

    document_id: str = Field(..., alias="documentId", min_length=1)
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")
    published_at: datetime | None = Field(None, alias="publishedAt")
    locale: str | None = None

    @property
    def payload(self) -> dict[str, Any]:
        """Record fields without store metadata."""
        return dict(self.model_extra or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_record().get(key, default)

    def to_record(self) -> dict[str, Any]:
        """
        Flatten to a JSON-compatible mapping keyed by wire names.

        Only metadata the store actually set is included, so a document
        without a publish date carries no ``publishedAt`` column.
        """
        return self.model_dump(by_alias=True, mode="json", exclude_unset=True)


def strip_reserved(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` without store-managed fields."""
    return {key: value for key, value in data.items() if key not in RESERVED_FIELDS}
