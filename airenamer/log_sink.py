"""Append-only storage for rename log entries."""

import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from airenamer.models.rename import RenameLogEntry


console = Console()

SHELL_ESCAPE_RE = re.compile(r'(["\\`$])')


def quote_for_shell(value: str) -> str:
    """Double-quote `value` for a POSIX shell, escaping `"`, `\\`, backtick and `$`."""
    return '"' + SHELL_ESCAPE_RE.sub(r"\\\1", value) + '"'


def build_revert_command(new_path: str, original_path: str) -> str:
    """Shell command that moves `new_path` back to `original_path`."""
    return f"mv {quote_for_shell(new_path)} {quote_for_shell(original_path)}"


class LogSink(ABC):
    """Destination for rename log entries. Implementations must be safe to call from several threads."""

    @abstractmethod
    def append(self, entry: RenameLogEntry) -> None:
        pass


class JsonlLogSink(LogSink):
    """Writes one JSON document per line. Each entry is written with a single call under a lock."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, entry: RenameLogEntry) -> None:
        line = entry.model_dump_json() + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as fh:
                fh.write(line)
                fh.flush()


def read_log_entries(path: Path, output: Console | None = None) -> list[RenameLogEntry]:
    """Load every entry from a JSON Lines log, oldest first.

    Blank lines are ignored. Lines that do not parse, such as one cut short by an
    interrupted write, are skipped with a warning so the rest of the log stays usable.
    """
    output = output or console
    entries = []
    with open(path, encoding="utf-8") as fh:
        for line_number, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                entries.append(RenameLogEntry.model_validate_json(line))
            except ValidationError:
                output.print(f"[yellow]Skipping malformed log line {line_number} in {escape(str(path))}[/yellow]")
    return entries
