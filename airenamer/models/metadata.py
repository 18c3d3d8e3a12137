"""File metadata data models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class FallbackDate(BaseModel):
    """A metadata date offered to the model when content carries none."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["created", "modified"] = Field(description="Which timestamp the date came from")
    value: str = Field(description="Date formatted as YYYY-MM-DD")


def format_date(value: str | None) -> str | None:
    """Reduce an ISO-8601 timestamp to `YYYY-MM-DD`, or None if it does not parse."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed.date().isoformat()


class FileMetadata(BaseModel):
    """Filesystem facts about a file, probed once before naming."""

    model_config = ConfigDict(frozen=True)

    size: int | None = Field(default=None, description="Size in bytes")
    size_label: str | None = Field(default=None, description="Human readable size, e.g. '1.2 MB'")
    created_at: str | None = Field(default=None, description="Creation time (ISO-8601)")
    modified_at: str | None = Field(default=None, description="Last modification time (ISO-8601)")
    tags: list[str] = Field(default_factory=list, description="OS tags, in the order the OS reports them")

    def fallback_date(self) -> FallbackDate | None:
        """Return the creation date, else the modification date."""
        created = format_date(self.created_at)
        if created:
            return FallbackDate(kind="created", value=created)
        modified = format_date(self.modified_at)
        if modified:
            return FallbackDate(kind="modified", value=modified)
        return None
