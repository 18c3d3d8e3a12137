"""Reduction of free-form model replies to valid filenames."""

import math
import re
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from airenamer.case import change_case
from airenamer.models.config import CaseStyle
from airenamer.models.metadata import FallbackDate


FALLBACK_PHRASE = "renamed file"
DEFAULT_CHAR_LIMIT = 20
DEFAULT_CANDIDATE_CEILING = 120
CANDIDATE_ALLOWANCE = 0.25

LABEL_RE = re.compile(
    r"^(?:(?:suggested|proposed|recommended)\s+)?(?:file\s?name|name|title)\s*(?:is\s*[:=]?|[:=])\s*",
    re.IGNORECASE,
)
QUOTE_RE = re.compile(r"[`\"'“”‘’]")
INVALID_CHARS_RE = re.compile(r"[^\w\s-]+")
WHITESPACE_RE = re.compile(r"\s+")
SEGMENT_SPLIT_RE = re.compile(r"[,;]+")
YEAR_RE = re.compile(r"(?<!\d)\d{4}(?!\d)")
SKIP_RE = re.compile(r"^skip\b", re.IGNORECASE)

# Tried in order against the whole reply; each hit contributes a candidate segment.
LABELED_VALUE_PATTERNS = [
    re.compile(r"(?:filename|file name)\s*(?:is|=|:)\s*([^\n]+)", re.IGNORECASE),
    re.compile(r"(?:suggested|proposed|recommended)\s*(?:filename|file name)\s*(?:is|=|:)?\s*([^\n]+)", re.IGNORECASE),
    re.compile(r"name\s*[:：]\s*([^\n]+)", re.IGNORECASE),
]


def candidate_ceiling(chars: int | None) -> int:
    """Length allowed for a candidate before case conversion and final enforcement."""
    if not isinstance(chars, int) or chars <= 0:
        return DEFAULT_CANDIDATE_CEILING
    return math.ceil(chars * (1 + CANDIDATE_ALLOWANCE))


def safe_char_limit(chars: int | None) -> int:
    if not isinstance(chars, int) or chars <= 0:
        return DEFAULT_CHAR_LIMIT
    return chars


def sanitize_segment(segment: str | None) -> str:
    """Strip quotes, a leading label and any character not allowed in a filename."""
    if not segment:
        return ""
    text = QUOTE_RE.sub("", segment).strip()
    text = LABEL_RE.sub("", text)
    text = INVALID_CHARS_RE.sub(" ", text)
    return WHITESPACE_RE.sub(" ", text).strip()


def shorten_to_limit(text: str, limit: int) -> str:
    """Cut `text` to `limit` characters at a word boundary.

    Falls back to a hard cut only when the first word alone is longer than `limit`.
    """
    if not text or limit <= 0 or len(text) <= limit:
        return text

    result = ""
    for word in text.split():
        extended = f"{result} {word}" if result else word
        if len(extended) > limit:
            break
        result = extended
    return result or text[:limit]


def normalize_reply(reply: str | None) -> str:
    if not reply:
        return ""
    return reply.replace("\r\n", "\n").replace("\r", "\n").replace("\x00", "").strip()


def extract_filename_candidate(reply: str | None, max_chars: int) -> str:
    """Pull the most plausible filename out of a model reply.

    Labeled values ("Filename: ...") are tried first, then each line, then each comma
    or semicolon separated segment. The first segment that survives sanitization wins.

    Returns:
        The candidate, or an empty string if nothing usable was found.
    """
    normalized = normalize_reply(reply)
    if not normalized:
        return ""

    segments: list[str] = []
    for pattern in LABELED_VALUE_PATTERNS:
        match = pattern.search(normalized)
        if match and match.group(1):
            segments.append(match.group(1))
    segments.extend(normalized.split("\n"))
    segments.extend(SEGMENT_SPLIT_RE.split(normalized))

    seen: set[str] = set()
    for segment in segments:
        cleaned = sanitize_segment(segment)
        if not cleaned:
            continue
        key = cleaned.lower()
        if key in seen:
            continue
        seen.add(key)

        shortened = shorten_to_limit(cleaned, max_chars)
        if shortened:
            return shortened

    return shorten_to_limit(sanitize_segment(normalized), max_chars)


def is_skip_reply(reply: str | None) -> bool:
    """True when a pitch deck reply is empty or starts with the SKIP token."""
    collapsed = WHITESPACE_RE.sub(" ", reply or "").strip()
    return not collapsed or bool(SKIP_RE.match(collapsed))


def append_tags(candidate: str, tags: list[str]) -> str:
    """Append sanitized, de-duplicated tags to the candidate, separated by ' - '."""
    cleaned: list[str] = []
    seen: set[str] = set()
    for tag in tags:
        value = sanitize_segment(tag)
        if not value or value.lower() in seen:
            continue
        seen.add(value.lower())
        cleaned.append(value)

    if not cleaned:
        return candidate
    return " - ".join([candidate] + cleaned) if candidate else " - ".join(cleaned)


def append_fallback_date(candidate: str, date: str, max_chars: int) -> str:
    """Append `date` unless the candidate already carries a 4-digit year.

    The base text is shortened to make room rather than dropping the date.
    """
    if YEAR_RE.search(candidate):
        return candidate

    suffix = f" {date}"
    base = candidate
    if len(base) + len(suffix) > max_chars:
        base = shorten_to_limit(base, max(max_chars - len(suffix), 0))
        if len(base) + len(suffix) > max_chars:
            base = ""
    return f"{base}{suffix}".strip()


def trim_to_boundary(text: str, limit: int) -> str:
    """Cut at the last `-` boundary, else the last `_` boundary, else hard cut."""
    if not text or limit <= 0 or len(text) <= limit:
        return text

    for separator in ("-", "_"):
        if separator not in text:
            continue
        result = ""
        for part in text.split(separator):
            if not part:
                continue
            extended = f"{result}{separator}{part}" if result else part
            if len(extended) > limit:
                break
            result = extended
        if result:
            return result

    return text[:limit].rstrip("-_")


def enforce_length_limit(value: str, limit: int) -> str:
    """Return `value` shortened to at most `limit` characters."""
    if not value or limit <= 0 or len(value) <= limit:
        return value
    return trim_to_boundary(value, limit) or value[:limit]


class Resolution(BaseModel):
    """How a model reply was turned into a filename."""

    model_config = ConfigDict(frozen=True)

    filename: str | None = None
    candidate: str | None = None
    used_fallback: bool = False
    truncated: bool = False
    skipped: bool = False
    tags_appended: bool = False
    fallback_date_applied: bool = False


class ResponseResolver:
    """Turns raw model replies into sanitized, case-converted, length-bounded names."""

    def __init__(
        self,
        case_style: CaseStyle,
        chars: int,
        pitch_deck_mode: bool = False,
        tags: list[str] | None = None,
        fallback_date: FallbackDate | None = None,
        case_transform: Callable[[str, CaseStyle], str] = change_case,
    ) -> None:
        self.case_style = case_style
        self.char_limit = safe_char_limit(chars)
        self.candidate_ceiling = candidate_ceiling(chars)
        self.pitch_deck_mode = pitch_deck_mode
        self.tags = tags or []
        self.fallback_date = fallback_date
        self.case_transform = case_transform

    def resolve(self, reply: str | None) -> Resolution:
        """Resolve a reply. Never raises for malformed input."""
        if self.pitch_deck_mode and is_skip_reply(reply):
            return Resolution(skipped=True)

        extracted = extract_filename_candidate(reply, self.candidate_ceiling)
        candidate = extracted or FALLBACK_PHRASE

        tags_appended = False
        if self.tags:
            with_tags = append_tags(candidate, self.tags)
            tags_appended = with_tags != candidate
            candidate = with_tags

        fallback_date_applied = False
        if self.fallback_date is not None:
            with_date = append_fallback_date(candidate, self.fallback_date.value, self.char_limit)
            fallback_date_applied = with_date != candidate
            candidate = with_date

        converted = self.case_transform(candidate, self.case_style)
        filename = enforce_length_limit(converted, self.char_limit)
        used_fallback = not extracted
        truncated = bool(converted and filename and converted != filename)

        if not filename:
            fallback = self.case_transform(FALLBACK_PHRASE, self.case_style)
            filename = enforce_length_limit(fallback, self.char_limit)
            used_fallback = True
            truncated = len(filename) < len(fallback)

        return Resolution(
            filename=filename or None,
            candidate=candidate,
            used_fallback=used_fallback,
            truncated=truncated,
            tags_appended=tags_appended,
            fallback_date_applied=fallback_date_applied,
        )
