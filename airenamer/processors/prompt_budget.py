"""Prompt assembly under fixed character ceilings."""

from airenamer.models.classification import ClassificationResult
from airenamer.models.config import (
    DEFAULT_MAX_CONTENT_CHARS,
    DEFAULT_MAX_PROMPT_CHARS,
    CaseStyle,
    PitchDeckFocus,
)
from airenamer.models.metadata import FallbackDate, FileMetadata, format_date
from airenamer.models.prompts import AssembledPrompt, PromptBudget
from airenamer.prompts import FILENAME_PROMPT_TEMPLATE, PITCH_DECK_PATTERNS, PITCH_DECK_PROMPT_TEMPLATE


# Extra characters removed from the content snippet when the assembled prompt overflows,
# so that the soft truncation landing short of its target still fits.
OVERFLOW_SAFETY_MARGIN = 200

NEWLINE_CUT_RATIO = 0.6
SENTENCE_CUT_RATIO = 0.5
MAX_COMPANY_HINTS = 5


def soft_truncate(text: str, limit: int) -> str:
    """Shorten `text` to at most `limit` characters, preferring natural boundaries.

    Cuts at the last newline if it falls after 60% of the limit, else after the last
    sentence-ending punctuation if it falls after 50% of the limit, else at `limit`.
    """
    if not text or limit <= 0:
        return ""
    if len(text) <= limit:
        return text

    head = text[:limit]
    last_newline = head.rfind("\n")
    if last_newline >= int(limit * NEWLINE_CUT_RATIO):
        return head[:last_newline].strip()

    last_sentence_break = max(head.rfind(". "), head.rfind("! "), head.rfind("? "))
    if last_sentence_break >= int(limit * SENTENCE_CUT_RATIO):
        return head[: last_sentence_break + 1].strip()

    return head.strip()


def build_metadata_hint(metadata: FileMetadata | None, enabled: bool = True) -> tuple[list[str], FallbackDate | None]:
    """Describe file metadata for the prompt and pick the fallback date."""
    if not enabled or metadata is None:
        return [], None

    lines = []
    created = format_date(metadata.created_at)
    modified = format_date(metadata.modified_at)
    if created:
        lines.append(f"Created on {created}")
    if modified:
        lines.append(f"Last modified on {modified}")
    if metadata.size_label:
        lines.append(f"Approximate size {metadata.size_label}")
    elif metadata.size is not None:
        lines.append(f"File size {metadata.size} bytes")
    if metadata.tags:
        lines.append(f"Tagged as {', '.join(metadata.tags)}")

    return lines, metadata.fallback_date()


def build_classifier_hints(classification: ClassificationResult) -> list[str]:
    lines = [
        "Pitch deck analysis:",
        f"- {classification.summary}",
        f"- Confidence: {classification.confidence.value} (score {classification.score:g})",
    ]
    if classification.company_candidates:
        names = ", ".join(classification.company_candidates[:MAX_COMPANY_HINTS])
        lines.append(f"- Possible company names: {names}")
    if classification.sample_line:
        lines.append(f'- Representative line: "{classification.sample_line}"')
    return lines


def compose_prompt_lines(
    *,
    case_style: CaseStyle,
    chars: int,
    language: str,
    pitch_deck_focus: PitchDeckFocus | None = None,
    filename_hint: str | None = None,
    metadata_lines: list[str] | None = None,
    fallback_date: FallbackDate | None = None,
    classifier_lines: list[str] | None = None,
    video_summary: str | None = None,
    content_snippet: str | None = None,
    content_original_length: int = 0,
    content_truncated: bool = False,
    custom_prompt: str | None = None,
) -> list[str]:
    """Lay out the prompt sections in order. Empty sections are omitted."""
    if pitch_deck_focus is not None:
        header = PITCH_DECK_PROMPT_TEMPLATE.format(
            pattern=PITCH_DECK_PATTERNS[pitch_deck_focus],
            case_style=case_style.value,
            chars=chars,
            language=language,
        )
    else:
        header = FILENAME_PROMPT_TEMPLATE.format(case_style=case_style.value, chars=chars, language=language)
    lines = header.split("\n")

    if filename_hint:
        lines += ["", f"Current filename for context: {filename_hint}"]

    if metadata_lines:
        lines += ["", "File metadata hints:"]
        lines += [f"- {line}" for line in metadata_lines]
        if fallback_date is not None:
            lines.append(f"If the content lacks a clear date, fall back to the {fallback_date.kind} date above.")

    if classifier_lines:
        lines += [""] + classifier_lines

    if video_summary:
        lines += ["", "Video summary:", video_summary]

    if content_snippet:
        if content_truncated:
            heading = f"Content preview (first {len(content_snippet)} of {content_original_length} characters):"
        else:
            heading = "Content:"
        lines += ["", heading, content_snippet]

    if custom_prompt:
        lines += ["", "Custom instructions:", custom_prompt]

    return lines


class PromptBudgeter:
    """Builds naming prompts that never exceed a total character ceiling.

    Content is the elastic part of the prompt: it is shrunk first, and the prompt
    as a whole is hard-cut only when instructions alone overflow the ceiling.
    """

    def __init__(
        self,
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
        max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS,
    ) -> None:
        self.max_content_chars = max(max_content_chars, 0)
        self.max_prompt_chars = max(max_prompt_chars, 0)

    def assemble(
        self,
        *,
        case_style: CaseStyle,
        chars: int,
        language: str,
        content: str | None = None,
        video_summary: str | None = None,
        metadata: FileMetadata | None = None,
        metadata_hints: bool = True,
        original_filename: str | None = None,
        use_filename_hint: bool = True,
        classification: ClassificationResult | None = None,
        pitch_deck_focus: PitchDeckFocus | None = None,
        custom_prompt: str | None = None,
    ) -> AssembledPrompt:
        """Assemble the prompt for one file.

        Args:
            case_style: Case style the name should use.
            chars: Maximum filename length.
            language: Language of the name.
            content: Extracted text, if any.
            video_summary: Description of sampled video frames, if any.
            metadata: Probed file metadata.
            metadata_hints: Whether metadata is shared with the model.
            original_filename: Current basename of the file.
            use_filename_hint: Whether the current basename is shared with the model.
            classification: Classifier output; only used with the pitch deck template.
            pitch_deck_focus: Selects the pitch deck template when set.
            custom_prompt: User supplied instructions.

        Returns:
            AssembledPrompt whose prompt is at most `max_prompt_chars` long.
        """
        content = content or ""
        original_length = len(content)
        snippet = content
        content_truncated = False
        if len(snippet) > self.max_content_chars:
            snippet = soft_truncate(snippet, self.max_content_chars)
            content_truncated = True

        metadata_lines, fallback_date = build_metadata_hint(metadata, metadata_hints)
        filename_hint = original_filename if use_filename_hint and original_filename else None
        classifier_lines = (
            build_classifier_hints(classification) if pitch_deck_focus is not None and classification else None
        )

        def render(current_snippet: str, truncated: bool) -> str:
            return "\n".join(
                compose_prompt_lines(
                    case_style=case_style,
                    chars=chars,
                    language=language,
                    pitch_deck_focus=pitch_deck_focus,
                    filename_hint=filename_hint,
                    metadata_lines=metadata_lines,
                    fallback_date=fallback_date,
                    classifier_lines=classifier_lines,
                    video_summary=video_summary,
                    content_snippet=current_snippet or None,
                    content_original_length=original_length,
                    content_truncated=truncated,
                    custom_prompt=custom_prompt,
                )
            )

        prompt = render(snippet, content_truncated)

        if len(prompt) > self.max_prompt_chars and snippet:
            overflow = len(prompt) - self.max_prompt_chars
            target = max(0, len(snippet) - overflow - OVERFLOW_SAFETY_MARGIN)
            shortened = soft_truncate(snippet, target) if target > 0 else ""
            if shortened != snippet:
                snippet = shortened
                content_truncated = True
                prompt = render(snippet, content_truncated)

        prompt_trimmed = False
        if len(prompt) > self.max_prompt_chars:
            prompt = prompt[: self.max_prompt_chars]
            prompt_trimmed = True

        return AssembledPrompt(
            prompt=prompt,
            budget=PromptBudget(
                max_content_chars=self.max_content_chars,
                max_prompt_chars=self.max_prompt_chars,
                content_snippet=snippet,
                content_original_length=original_length,
                content_truncated=content_truncated,
            ),
            prompt_trimmed=prompt_trimmed,
            metadata_lines=metadata_lines,
            fallback_date=fallback_date,
            filename_hint_included=filename_hint is not None,
            classifier_hints_included=bool(classifier_lines),
        )
