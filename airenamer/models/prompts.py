"""Prompt assembly data models."""

from pydantic import BaseModel, ConfigDict, Field

from airenamer.models.config import DEFAULT_MAX_CONTENT_CHARS, DEFAULT_MAX_PROMPT_CHARS
from airenamer.models.metadata import FallbackDate


class PromptBudget(BaseModel):
    """Character ceilings for a prompt and the content snippet that fits them."""

    model_config = ConfigDict(frozen=True)

    max_content_chars: int = Field(default=DEFAULT_MAX_CONTENT_CHARS, ge=0)
    max_prompt_chars: int = Field(default=DEFAULT_MAX_PROMPT_CHARS, ge=0)
    content_snippet: str = Field(default="", description="Content as it appears in the prompt")
    content_original_length: int = Field(default=0, description="Length of the content before truncation")
    content_truncated: bool = False


class AssembledPrompt(BaseModel):
    """A prompt ready to send, plus what went into it."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    budget: PromptBudget
    prompt_trimmed: bool = Field(default=False, description="Whether the whole prompt was hard-cut")
    metadata_lines: list[str] = Field(default_factory=list)
    fallback_date: FallbackDate | None = None
    filename_hint_included: bool = False
    classifier_hints_included: bool = False

    def __len__(self) -> int:
        return len(self.prompt)
