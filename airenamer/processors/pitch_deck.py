"""Heuristic detection of investor pitch decks in extracted text."""

import re

from airenamer.models.classification import ClassificationResult, ConfidenceBucket


DEFAULT_MAX_SCAN_CHARS = 20000

STRONG_KEYWORDS = [
    "pitch deck",
    "investor deck",
    "investor presentation",
    "fundraising deck",
    "fund raising deck",
    "fundraise deck",
]

FUNDING_KEYWORDS = [
    "seed round",
    "pre-seed",
    "series a",
    "series b",
    "series c",
    "series d",
    "series e",
    "bridge round",
    "angel round",
    "vc round",
    "funding round",
    "capital raise",
    "venture round",
]

INVESTOR_KEYWORDS = [
    "investor",
    "investment",
    "venture capital",
    "vc",
    "capital raise",
    "fundraising",
    "fund raising",
    "term sheet",
]

SECTION_KEYWORDS = [
    "problem",
    "solution",
    "market",
    "market size",
    "market opportunity",
    "product",
    "business model",
    "traction",
    "financials",
    "financial projections",
    "go-to-market",
    "go to market",
    "competitive landscape",
    "competition",
    "team",
    "roadmap",
    "use of funds",
    "funds use",
    "revenue",
    "milestones",
    "ask",
    "summary",
]

# Scoring weights and thresholds. These are empirical and tunable; changing them
# changes which documents get the pitch deck template.
STRONG_WEIGHT = 4.0
FUNDING_WEIGHT = 1.5
FUNDING_CAP = 2
INVESTOR_WEIGHT = 0.75
INVESTOR_CAP = 3
SECTION_WEIGHT = 0.5
SECTION_CAP = 6
MULTIPLE_SECTIONS_BONUS = 2.0
MULTIPLE_SECTIONS_MIN = 4
PITCH_DECK_THRESHOLD = 3.5
CONFIDENCE_THRESHOLDS = [
    (6.0, ConfidenceBucket.HIGH),
    (4.0, ConfidenceBucket.MEDIUM),
    (2.0, ConfidenceBucket.LOW),
]

MAX_COMPANY_LINE_CHARS = 120
MIN_COMPANY_CANDIDATE_CHARS = 3
UPPERCASE_LINE_RATIO = 0.6

COMPANY_RE = re.compile(
    r"([A-Z][A-Za-z0-9&']+(?:\s+[A-Z][A-Za-z0-9&']+)*)\s+"
    r"(?:Inc\.?|Incorporated|Corp\.?|Corporation|LLC|L\.L\.C\.|Ltd\.?|Limited|Company|Co\.?)(?![A-Za-z])"
)
UPPERCASE_WORD_RE = re.compile(r"[A-Z][A-Z0-9&']+")
SAMPLE_LINE_RE = re.compile(r"deck|presentation|investor|fund", re.IGNORECASE)


def collect_matches(text: str, keywords: list[str]) -> list[str]:
    """Return the keywords contained in `text`, in keyword-list order."""
    matches: list[str] = []
    for keyword in keywords:
        if keyword in text and keyword not in matches:
            matches.append(keyword)
    return matches


def score_matches(strong: int, funding: int, investor: int, sections: int) -> float:
    """Weighted score built from the number of matches per category."""
    score = 0.0
    if strong > 0:
        score += STRONG_WEIGHT
    score += min(funding, FUNDING_CAP) * FUNDING_WEIGHT
    score += min(investor, INVESTOR_CAP) * INVESTOR_WEIGHT
    score += min(sections, SECTION_CAP) * SECTION_WEIGHT
    if sections >= MULTIPLE_SECTIONS_MIN:
        score += MULTIPLE_SECTIONS_BONUS
    return score


def confidence_bucket(score: float) -> ConfidenceBucket:
    for threshold, bucket in CONFIDENCE_THRESHOLDS:
        if score >= threshold:
            return bucket
    return ConfidenceBucket.NONE


def extract_company_candidates(lines: list[str]) -> list[str]:
    """Guess company names from lines of text.

    Names followed by a corporate suffix (Inc, LLC, ...) are preferred. When none
    are found, short lines written mostly in capitals are taken whole, since deck
    title slides tend to shout the company name.
    """
    candidates: list[str] = []
    seen: set[str] = set()

    def consider(value: str) -> None:
        trimmed = value.strip()
        if len(trimmed) < MIN_COMPANY_CANDIDATE_CHARS:
            return
        key = trimmed.lower()
        if key in seen:
            return
        seen.add(key)
        candidates.append(trimmed)

    for line in lines:
        for match in COMPANY_RE.finditer(line):
            consider(match.group(1))

    if candidates:
        return candidates

    for line in lines:
        if not line or len(line) > MAX_COMPANY_LINE_CHARS:
            continue
        words = line.split()
        if len(words) < 2 or len(words) > 8:
            continue
        uppercase = sum(1 for word in words if UPPERCASE_WORD_RE.fullmatch(word))
        if uppercase / len(words) >= UPPERCASE_LINE_RATIO:
            consider(" ".join(words))

    return candidates


def _build_summary(strong: list[str], funding: list[str], sections: list[str], investor: list[str]) -> str:
    details = []
    if strong:
        details.append(f"strong keywords ({', '.join(strong)})")
    if funding:
        details.append(f"funding references ({', '.join(funding)})")
    if len(sections) >= 3:
        details.append(f"multiple deck sections ({', '.join(sections[:5])})")
    if investor:
        details.append(f"investor language ({', '.join(investor)})")

    if not details:
        return "No strong pitch deck indicators detected."
    return f"Detected {'; '.join(details)}."


def classify_pitch_deck(text: str | None, max_chars: int = DEFAULT_MAX_SCAN_CHARS) -> ClassificationResult:
    """Score `text` for pitch deck signals.

    Args:
        text: Extracted document text. May be empty or None.
        max_chars: Only the first `max_chars` characters are scanned.

    Returns:
        ClassificationResult with the verdict, score, matches and company guesses.
    """
    if not text:
        return ClassificationResult(
            is_pitch_deck=False,
            score=0.0,
            confidence=ConfidenceBucket.NONE,
            summary="No text content was available for analysis.",
        )

    limited = text[:max_chars]
    normalized = limited.lower()

    strong = collect_matches(normalized, STRONG_KEYWORDS)
    funding = collect_matches(normalized, FUNDING_KEYWORDS)
    investor = collect_matches(normalized, INVESTOR_KEYWORDS)
    sections = collect_matches(normalized, SECTION_KEYWORDS)

    score = score_matches(len(strong), len(funding), len(investor), len(sections))
    is_pitch_deck = score >= PITCH_DECK_THRESHOLD or bool(strong) or len(sections) >= MULTIPLE_SECTIONS_MIN

    lines = [line.strip() for line in limited.splitlines()]
    lines = [line for line in lines if line]
    sample_line = next((line for line in lines if SAMPLE_LINE_RE.search(line)), lines[0] if lines else None)

    return ClassificationResult(
        is_pitch_deck=is_pitch_deck,
        score=score,
        confidence=confidence_bucket(score),
        strong_matches=strong,
        funding_matches=funding,
        investor_matches=investor,
        section_matches=sections,
        company_candidates=extract_company_candidates(lines),
        summary=_build_summary(strong, funding, sections, investor),
        sample_line=sample_line,
    )
