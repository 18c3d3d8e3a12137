"""Filesystem metadata and OS tag probing."""

import os
import subprocess
import sys
from datetime import datetime, timezone
from pathlib import Path

from airenamer.errors import MetadataProbeError
from airenamer.models.metadata import FileMetadata


SIZE_UNITS = ["KB", "MB", "GB", "TB"]
MDLS_TIMEOUT_SECONDS = 5


def format_size(size: int | None) -> str | None:
    """Human readable size: bytes below 1 KB, one decimal below 10 units."""
    if size is None or size < 0:
        return None
    if size < 1024:
        return f"{size} B"

    value = size / 1024
    unit_ix = 0
    while value >= 1024 and unit_ix < len(SIZE_UNITS) - 1:
        value /= 1024
        unit_ix += 1
    return f"{value:.0f} {SIZE_UNITS[unit_ix]}" if value >= 10 else f"{value:.1f} {SIZE_UNITS[unit_ix]}"


def _isoformat(timestamp: float | None) -> str | None:
    if timestamp is None:
        return None
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def probe_metadata(path: Path) -> FileMetadata:
    """Read size and timestamps for `path`.

    The creation time is only reported on platforms that record it (macOS, BSD,
    Windows); elsewhere it is None.

    Raises:
        MetadataProbeError: If the file cannot be stat'ed.
    """
    try:
        stats = os.stat(path)
    except OSError as e:
        raise MetadataProbeError(f"Unable to read metadata for {path}: {e}") from e

    birth_time = getattr(stats, "st_birthtime", None)
    if birth_time is None and sys.platform == "win32":
        birth_time = stats.st_ctime

    return FileMetadata(
        size=stats.st_size,
        size_label=format_size(stats.st_size),
        created_at=_isoformat(birth_time),
        modified_at=_isoformat(stats.st_mtime),
    )


def parse_mdls_tags(output: str) -> list[str]:
    """Parse `mdls -raw -name kMDItemUserTags` output, e.g. '(\\n    Red,\\n    "Q3 Work"\\n)'."""
    text = output.strip()
    if not text or text == "(null)":
        return []
    text = text.strip("()")

    tags: list[str] = []
    for line in text.splitlines():
        tag = line.strip().rstrip(",").strip().strip('"')
        # Finder appends the colour index after a newline escape, e.g. "Red\n6".
        tag = tag.split("\\n")[0].strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def read_os_tags(path: Path) -> list[str]:
    """Return Finder tags for `path` on macOS, or an empty list elsewhere."""
    if sys.platform != "darwin":
        return []

    result = subprocess.run(
        ["mdls", "-raw", "-name", "kMDItemUserTags", str(path)],
        capture_output=True,
        text=True,
        timeout=MDLS_TIMEOUT_SECONDS,
        check=True,
    )
    return parse_mdls_tags(result.stdout)
