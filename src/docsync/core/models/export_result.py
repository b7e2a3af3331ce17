"""
ExportResult model carrying a serialized collection (ephemeral).
"""

import re
from datetime import datetime, timezone

from pydantic import BaseModel, Field

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")


class ExportResult(BaseModel):
    """
    Serialized export payload.

    Attributes:
        data: Serialized text or binary payload
        mime_type: MIME type for the response/content header
        filename: Suggested download filename
    """

    data: str | bytes
    mime_type: str = Field(..., min_length=1)
    filename: str = Field(..., min_length=1)


def build_export_filename(collection: str, extension: str, now: datetime | None = None) -> str:
    """
    Build ``export_<collection>_<timestamp>.<extension>``.

    The collection is reduced to ``[A-Za-z0-9_-]`` and the UTC ISO-8601
    timestamp has ``:`` and ``.`` replaced by ``-``.
    """
    now = now or datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
    timestamp = iso.replace(":", "-").replace(".", "-")
    safe_collection = _UNSAFE_FILENAME_CHARS.sub("_", collection)
    return f"export_{safe_collection}_{timestamp}.{extension}"
