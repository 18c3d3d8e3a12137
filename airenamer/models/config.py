"""Run configuration data models."""

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_MODEL_IDENTIFIER = "gpt-5.1"
DEFAULT_MAX_CONTENT_CHARS = 8000
DEFAULT_MAX_PROMPT_CHARS = 12000
MIN_PROMPT_CHARS = 2000


def _style_key(value: str) -> str:
    key = re.sub(r"[^a-z]", "", value.lower())
    return key[: -len("case")] if key.endswith("case") and key != "case" else key


class CaseStyle(str, Enum):
    """Case styles understood by `airenamer.case.change_case`."""

    CAMEL = "camelCase"
    CAPITAL = "capitalCase"
    CONSTANT = "constantCase"
    DOT = "dotCase"
    KEBAB = "kebabCase"
    NO = "noCase"
    PASCAL = "pascalCase"
    PASCAL_SNAKE = "pascalSnakeCase"
    SENTENCE = "sentenceCase"
    SNAKE = "snakeCase"
    TRAIN = "trainCase"

    @classmethod
    def _missing_(cls, value: object) -> "CaseStyle | None":
        # Accept loose spellings such as "kebab", "kebab-case" or "KEBAB_CASE".
        if not isinstance(value, str):
            return None
        key = _style_key(value)
        for member in cls:
            if _style_key(member.value) == key:
                return member
        return None


class PitchDeckMode(str, Enum):
    """How the pitch-deck naming template is applied to text files."""

    OFF = "off"
    AUTO = "auto"  # use the deck template when the classifier detects a deck
    ONLY = "only"  # skip every file the classifier does not consider a deck


class PitchDeckFocus(str, Enum):
    """Which details the pitch-deck template asks the model to put in the name."""

    COMPANY = "company"
    ROUND = "round"
    DATE = "date"


class RenameConfig(BaseModel):
    """Validated settings for one rename run."""

    model_config = ConfigDict(frozen=True)

    case_style: CaseStyle = Field(default=CaseStyle.KEBAB, description="Case style applied to new names")
    chars: int = Field(default=20, ge=1, description="Maximum characters in a new filename")
    language: str = Field(default="English", min_length=1, description="Language of generated names")
    model_identifier: str = Field(default=DEFAULT_MODEL_IDENTIFIER, description="Chat model identifier")
    frames: int = Field(default=3, ge=1, description="Frames sampled from each video")
    custom_prompt: str | None = Field(default=None, description="Extra instructions appended to the prompt")
    convert_binary: bool = Field(default=False, description="Extract printable text from binary files")
    include_subdirectories: bool = Field(default=False, description="Walk directories recursively")
    force_change: bool = Field(default=False, description="Apply renames without confirmation")
    metadata_hints: bool = Field(default=True, description="Share file metadata with the model")
    use_filename_hint: bool = Field(default=True, description="Share the current filename with the model")
    append_tags: bool = Field(default=False, description="Append OS tags to new names")
    append_date: bool = Field(default=False, description="Append a metadata date to names without a year")
    pitch_deck: PitchDeckMode = Field(default=PitchDeckMode.OFF)
    pitch_deck_focus: PitchDeckFocus = Field(default=PitchDeckFocus.COMPANY)
    max_prompt_content_chars: int = Field(default=DEFAULT_MAX_CONTENT_CHARS, ge=0)
    max_prompt_chars: int = Field(default=DEFAULT_MAX_PROMPT_CHARS, ge=MIN_PROMPT_CHARS)
    concurrency: int = Field(default=1, ge=1, description="Files processed in parallel")
    log_file: Path | None = Field(default=None, description="JSON Lines file receiving rename log entries")
    verbose: bool = False
