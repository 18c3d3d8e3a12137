"""Pitch deck classification data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ConfidenceBucket(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ClassificationResult(BaseModel):
    """Outcome of scanning a document for pitch deck signals."""

    model_config = ConfigDict(frozen=True)

    is_pitch_deck: bool = Field(description="Whether the text looks like an investor pitch deck")
    score: float = Field(description="Weighted signal score (unbounded)")
    confidence: ConfidenceBucket = Field(description="Coarse bucket derived from the score")
    strong_matches: list[str] = Field(default_factory=list)
    funding_matches: list[str] = Field(default_factory=list)
    investor_matches: list[str] = Field(default_factory=list)
    section_matches: list[str] = Field(default_factory=list)
    company_candidates: list[str] = Field(default_factory=list)
    summary: str = Field(description="Human readable explanation of the verdict")
    sample_line: str | None = Field(default=None, description="A representative line from the text")

    def __str__(self) -> str:
        return (
            f"ClassificationResult(is_pitch_deck={self.is_pitch_deck}, score={self.score}, "
            f"confidence='{self.confidence.value}')"
        )
