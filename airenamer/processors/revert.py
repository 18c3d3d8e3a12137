"""Undo renames recorded in the rename log."""

from pathlib import Path

from airenamer.errors import RevertError
from airenamer.models.rename import RenameLogEntry


def revert_entry(entry: RenameLogEntry) -> Path:
    """Move the renamed file back to its original path.

    Returns:
        The restored original path.

    Raises:
        RevertError: If the renamed file is gone or the original path is occupied.
    """
    new_path = Path(entry.new_path)
    original_path = Path(entry.original_path)

    if not new_path.exists():
        raise RevertError(f"Renamed file no longer exists: {new_path}")
    if original_path.exists():
        raise RevertError(f"Original path is already taken: {original_path}")

    new_path.rename(original_path)
    return original_path


def revert_entries(entries: list[RenameLogEntry]) -> tuple[list[Path], list[RevertError]]:
    """Revert entries newest first, collecting failures instead of stopping at the first one."""
    restored: list[Path] = []
    failures: list[RevertError] = []
    for entry in reversed(entries):
        try:
            restored.append(revert_entry(entry))
        except RevertError as e:
            failures.append(e)
    return restored, failures
