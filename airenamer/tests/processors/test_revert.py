"""Unit tests for reverting logged renames."""

from pathlib import Path

import pytest

from airenamer.errors import RevertError
from airenamer.log_sink import build_revert_command
from airenamer.models.config import CaseStyle
from airenamer.models.rename import NameContext, RenameLogEntry
from airenamer.processors.revert import revert_entries, revert_entry


def make_entry(original: Path, new: Path) -> RenameLogEntry:
    return RenameLogEntry(
        original_path=str(original),
        new_path=str(new),
        original_name=original.name,
        new_name=new.name,
        original_relative_path=original.name,
        new_relative_path=new.name,
        accepted_at="2024-03-05T10:00:00+00:00",
        confirmation="user confirmed",
        context=NameContext(case_style=CaseStyle.KEBAB, char_limit=20, final_name=new.stem),
        revert_command=build_revert_command(str(new), str(original)),
        revert_command_relative=build_revert_command(new.name, original.name),
    )


class TestRevertEntry:
    """Tests for revert_entry."""

    def test_restores_original_name(self, tmp_path: Path):
        original = tmp_path / "IMG_0001.txt"
        renamed = tmp_path / "beach-trip.txt"
        renamed.write_text("sand")

        restored = revert_entry(make_entry(original, renamed))

        assert restored == original
        assert original.read_text() == "sand"
        assert not renamed.exists()

    def test_missing_renamed_file(self, tmp_path: Path):
        with pytest.raises(RevertError, match="no longer exists"):
            revert_entry(make_entry(tmp_path / "a.txt", tmp_path / "alpha.txt"))

    def test_original_path_taken(self, tmp_path: Path):
        """Test that an occupied original path is never overwritten."""
        original = tmp_path / "a.txt"
        renamed = tmp_path / "alpha.txt"
        original.write_text("newer file")
        renamed.write_text("renamed file")

        with pytest.raises(RevertError, match="already taken"):
            revert_entry(make_entry(original, renamed))

        assert original.read_text() == "newer file"
        assert renamed.read_text() == "renamed file"


class TestRevertEntries:
    """Tests for revert_entries."""

    def test_chained_renames_are_undone_newest_first(self, tmp_path: Path):
        """Test that a file renamed twice returns to its first name."""
        first = tmp_path / "scan.txt"
        second = tmp_path / "notes.txt"
        third = tmp_path / "meeting-notes.txt"
        third.write_text("agenda")
        entries = [make_entry(first, second), make_entry(second, third)]

        restored, failures = revert_entries(entries)

        assert failures == []
        assert restored == [second, first]
        assert first.read_text() == "agenda"
        assert not second.exists()
        assert not third.exists()

    def test_failures_do_not_stop_other_reverts(self, tmp_path: Path):
        kept = tmp_path / "kept.txt"
        kept_renamed = tmp_path / "kept-renamed.txt"
        kept_renamed.write_text("x")
        entries = [make_entry(kept, kept_renamed), make_entry(tmp_path / "gone.txt", tmp_path / "gone-renamed.txt")]

        restored, failures = revert_entries(entries)

        assert restored == [kept]
        assert len(failures) == 1
        assert "gone-renamed.txt" in str(failures[0])
