"""Tests for data models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from airenamer.models.config import CaseStyle, PitchDeckMode, RenameConfig
from airenamer.models.metadata import FileMetadata, format_date
from airenamer.models.rename import NameContext, RenameLogEntry


class TestCaseStyle:
    """Tests for CaseStyle parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("kebabCase", CaseStyle.KEBAB),
            ("kebab", CaseStyle.KEBAB),
            ("kebab-case", CaseStyle.KEBAB),
            ("KEBAB_CASE", CaseStyle.KEBAB),
            ("snake_case", CaseStyle.SNAKE),
            ("pascal_snake", CaseStyle.PASCAL_SNAKE),
            ("noCase", CaseStyle.NO),
            ("no", CaseStyle.NO),
        ],
    )
    def test_loose_spellings(self, value, expected):
        assert CaseStyle(value) is expected

    @pytest.mark.parametrize("value", ["wavy", "case", "", "pathCase"])
    def test_unknown_style(self, value):
        with pytest.raises(ValueError):
            CaseStyle(value)


class TestRenameConfig:
    """Tests for RenameConfig validation."""

    def test_defaults(self):
        config = RenameConfig()

        assert config.case_style is CaseStyle.KEBAB
        assert config.chars == 20
        assert config.language == "English"
        assert config.frames == 3
        assert config.metadata_hints is True
        assert config.use_filename_hint is True
        assert config.pitch_deck is PitchDeckMode.OFF
        assert config.max_prompt_content_chars == 8000
        assert config.max_prompt_chars == 12000
        assert config.concurrency == 1
        assert config.log_file is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"chars": 0},
            {"frames": 0},
            {"concurrency": 0},
            {"max_prompt_chars": 1999},
            {"max_prompt_content_chars": -1},
            {"language": ""},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValidationError):
            RenameConfig(**overrides)

    def test_frozen(self):
        config = RenameConfig()

        with pytest.raises(ValidationError):
            config.chars = 40


class TestFileMetadata:
    """Tests for metadata dates."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2024-03-05T10:00:00+00:00", "2024-03-05"),
            ("2024-03-05T10:00:00Z", "2024-03-05"),
            ("2024-03-05", "2024-03-05"),
            ("not a date", None),
            ("", None),
            (None, None),
        ],
    )
    def test_format_date(self, value, expected):
        assert format_date(value) == expected

    def test_fallback_prefers_creation_date(self):
        metadata = FileMetadata(created_at="2024-03-05T10:00:00+00:00", modified_at="2024-04-01T10:00:00+00:00")

        fallback = metadata.fallback_date()

        assert fallback.kind == "created"
        assert fallback.value == "2024-03-05"

    def test_fallback_uses_modification_date(self):
        metadata = FileMetadata(created_at="garbage", modified_at="2024-04-01T10:00:00+00:00")

        fallback = metadata.fallback_date()

        assert fallback.kind == "modified"
        assert fallback.value == "2024-04-01"

    def test_no_fallback(self):
        assert FileMetadata().fallback_date() is None


def test_log_entry_round_trips_through_json(tmp_path: Path):
    """Test that a log entry survives serialization with its nested context."""
    entry = RenameLogEntry(
        original_path=str(tmp_path / "a.txt"),
        new_path=str(tmp_path / "budget.txt"),
        original_name="a.txt",
        new_name="budget.txt",
        original_relative_path="a.txt",
        new_relative_path="budget.txt",
        accepted_at="2024-03-05T10:00:00+00:00",
        confirmation="force-change",
        context=NameContext(case_style=CaseStyle.KEBAB, char_limit=20, final_name="budget", source="text"),
        file_metadata=FileMetadata(size=10),
        tags=[],
        revert_command=f'mv "{tmp_path / "budget.txt"}" "{tmp_path / "a.txt"}"',
        revert_command_relative='mv "budget.txt" "a.txt"',
    )

    restored = RenameLogEntry.model_validate_json(entry.model_dump_json())

    assert restored == entry
    assert restored.context.case_style is CaseStyle.KEBAB
