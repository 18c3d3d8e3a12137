"""Rename data models."""

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from airenamer.models.classification import ClassificationResult
from airenamer.models.config import CaseStyle
from airenamer.models.metadata import FallbackDate, FileMetadata


class NameContext(BaseModel):
    """Audit record describing how a filename was produced for one file."""

    model_config = ConfigDict(frozen=True)

    summary: str = Field(default="", description="Human readable account of the naming decision")
    case_style: CaseStyle
    char_limit: int
    candidate: str | None = Field(default=None, description="Sanitized candidate before case conversion")
    final_name: str | None = Field(default=None, description="Chosen name without extension; None when skipped")
    used_fallback: bool = False
    truncated: bool = False
    source: Literal["text", "visual", "prompt-only"] = "prompt-only"
    model_response: str | None = None
    model_response_preview: str | None = None
    prompt_length: int = 0
    prompt_preview: str = ""
    prompt_trimmed: bool = False
    max_prompt_chars: int = 0
    max_content_chars: int = 0
    content_length: int = 0
    content_snippet_length: int = 0
    content_truncated: bool = False
    custom_prompt_included: bool = False
    video_summary_included: bool = False
    filename_hint_included: bool = False
    metadata_hint_included: bool = False
    metadata_fallback: FallbackDate | None = None
    fallback_date_applied: bool = False
    tags_appended: bool = False
    pitch_deck_mode: bool = False
    pitch_deck_skip: bool = False
    classification: ClassificationResult | None = None


class RenameLogEntry(BaseModel):
    """One applied rename, with the commands that undo it."""

    model_config = ConfigDict(frozen=True)

    original_path: str = Field(description="Absolute path before the rename")
    new_path: str = Field(description="Absolute path after the rename")
    original_name: str
    new_name: str
    original_relative_path: str
    new_relative_path: str
    accepted_at: str = Field(description="When the rename was accepted (ISO-8601)")
    confirmation: Literal["force-change", "user confirmed"]
    context: NameContext
    file_metadata: FileMetadata | None = None
    tags: list[str] = Field(default_factory=list)
    revert_command: str = Field(description="Shell command restoring the original absolute path")
    revert_command_relative: str = Field(description="Shell command restoring the original relative path")

    def __str__(self) -> str:
        return f"RenameLogEntry('{self.original_relative_path}' -> '{self.new_relative_path}')"


class Outcome(str, Enum):
    """Terminal states of the per-file pipeline."""

    RENAMED = "renamed"
    SKIPPED = "skipped"
    UNSUPPORTED = "unsupported"
    NO_CONTENT = "no_content"
    ERROR = "error"


class SkipReason(str, Enum):
    MODEL_DECLINED = "model_declined"
    NO_NAME = "no_name"
    NOT_PITCH_DECK = "not_pitch_deck"
    CONFIRMATION_DECLINED = "confirmation_declined"
    NON_INTERACTIVE = "non_interactive"
    UNCHANGED = "unchanged"


class FileOutcome(BaseModel):
    """What happened to a single file."""

    model_config = ConfigDict(frozen=True)

    path: Path
    relative_path: str
    outcome: Outcome
    skip_reason: SkipReason | None = None
    message: str = ""
    new_path: Path | None = None
    context: NameContext | None = None
    log_entry: RenameLogEntry | None = None

    def __str__(self) -> str:
        return f"FileOutcome('{self.relative_path}', outcome={self.outcome.value})"
