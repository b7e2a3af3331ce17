"""
ProcessorOptions model configuring a single import or export call.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProcessorOptions(BaseModel):
    """
    Options for one import or export operation.

    Attributes:
        collection: Target collection identifier (e.g. "api::article.article")
        locale: Locale used to scope lookups and tag created documents
        id_field: Field used to detect existing documents for upsert;
                  when unset every record is created
        exclude_fields: Fields dropped from exported documents
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "collection": "api::article.article",
                "locale": "en",
                "id_field": "slug",
                "exclude_fields": ["documentId", "createdAt", "updatedAt"],
            }
        }
    )

    collection: str = Field(..., min_length=1)
    locale: str | None = None
    id_field: str | None = None
    exclude_fields: list[str] = Field(default_factory=list)

    @field_validator("locale", "id_field")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings as unset."""
        if v is not None and not v.strip():
            return None
        return v
