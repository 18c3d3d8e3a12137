"""Case style transforms applied to generated filenames."""

import re

from airenamer.models.config import CaseStyle


_CHUNK_RE = re.compile(r"[^\W_]+")


def _split_humps(chunk: str) -> list[str]:
    """Split `fooBar`, `XMLHttp` and `q3Report` style humps into words."""
    words = []
    start = 0
    for ix in range(1, len(chunk)):
        prev, cur = chunk[ix - 1], chunk[ix]
        following = chunk[ix + 1] if ix + 1 < len(chunk) else ""
        if cur.isupper() and (prev.islower() or prev.isdigit()):
            words.append(chunk[start:ix])
            start = ix
        elif cur.isupper() and prev.isupper() and following.islower():
            words.append(chunk[start:ix])
            start = ix
    words.append(chunk[start:])
    return [word for word in words if word]


def split_words(text: str) -> list[str]:
    """Break free text into case-neutral word tokens."""
    words: list[str] = []
    for chunk in _CHUNK_RE.findall(text or ""):
        words.extend(_split_humps(chunk))
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def _join_humps(words: list[str], first_lower: bool) -> str:
    parts = []
    for ix, word in enumerate(words):
        if ix == 0:
            parts.append(word.lower() if first_lower else _capitalize(word))
        elif word[0].isdigit():
            # Keep digit runs readable: "version_2" rather than "version2".
            parts.append(f"_{word}")
        else:
            parts.append(_capitalize(word))
    return "".join(parts)


def change_case(text: str, style: CaseStyle) -> str:
    """Convert `text` to the given case style."""
    words = split_words(text)
    if not words:
        return ""

    style = CaseStyle(style)
    if style is CaseStyle.CAMEL:
        return _join_humps(words, first_lower=True)
    if style is CaseStyle.PASCAL:
        return _join_humps(words, first_lower=False)
    if style is CaseStyle.PASCAL_SNAKE:
        return "_".join(_capitalize(word) for word in words)
    if style is CaseStyle.SNAKE:
        return "_".join(word.lower() for word in words)
    if style is CaseStyle.KEBAB:
        return "-".join(word.lower() for word in words)
    if style is CaseStyle.CONSTANT:
        return "_".join(word.upper() for word in words)
    if style is CaseStyle.CAPITAL:
        return " ".join(_capitalize(word) for word in words)
    if style is CaseStyle.TRAIN:
        return "-".join(_capitalize(word) for word in words)
    if style is CaseStyle.SENTENCE:
        return " ".join([_capitalize(words[0])] + [word.lower() for word in words[1:]])
    if style is CaseStyle.DOT:
        return ".".join(word.lower() for word in words)
    return " ".join(word.lower() for word in words)
