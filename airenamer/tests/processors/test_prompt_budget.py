"""Unit tests for prompt assembly and budgeting."""

import pytest

from airenamer.models.config import CaseStyle, PitchDeckFocus
from airenamer.models.metadata import FileMetadata
from airenamer.processors.pitch_deck import classify_pitch_deck
from airenamer.processors.prompt_budget import PromptBudgeter, build_metadata_hint, soft_truncate


@pytest.fixture
def budgeter():
    return PromptBudgeter()


@pytest.fixture
def base_args():
    return dict(case_style=CaseStyle.KEBAB, chars=20, language="English")


class TestSoftTruncate:
    """Tests for soft_truncate."""

    def test_short_text_unchanged(self):
        assert soft_truncate("short text", 100) == "short text"

    def test_prefers_late_newline(self):
        """Test that a newline past 60% of the limit is used as the cut point."""
        text = "a" * 70 + "\n" + "b" * 50

        assert soft_truncate(text, 100) == "a" * 70

    def test_ignores_early_newline(self):
        """Test that a newline before 60% of the limit is not used."""
        text = "a" * 10 + "\n" + "b" * 200

        result = soft_truncate(text, 100)

        assert len(result) == 100
        assert result.startswith("a" * 10 + "\n")

    def test_falls_back_to_sentence_break(self):
        """Test that a sentence end past 50% of the limit is used when no newline qualifies."""
        text = "a" * 55 + ". " + "b" * 60

        assert soft_truncate(text, 100) == "a" * 55 + "."

    def test_hard_cut(self):
        assert soft_truncate("a" * 150, 100) == "a" * 100

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit(self, limit):
        assert soft_truncate("anything", limit) == ""


class TestBuildMetadataHint:
    """Tests for build_metadata_hint."""

    def test_lines_and_fallback(self):
        """Test that dates, size and tags become hint lines with the creation date as fallback."""
        metadata = FileMetadata(
            size=1234,
            size_label="1.2 KB",
            created_at="2024-03-05T10:00:00+00:00",
            modified_at="2024-04-01T08:30:00+00:00",
            tags=["Work"],
        )

        lines, fallback = build_metadata_hint(metadata)

        assert lines == [
            "Created on 2024-03-05",
            "Last modified on 2024-04-01",
            "Approximate size 1.2 KB",
            "Tagged as Work",
        ]
        assert fallback.kind == "created"
        assert fallback.value == "2024-03-05"

    def test_size_in_bytes_without_label(self):
        lines, fallback = build_metadata_hint(FileMetadata(size=42))

        assert lines == ["File size 42 bytes"]
        assert fallback is None

    def test_disabled(self):
        metadata = FileMetadata(created_at="2024-03-05T10:00:00+00:00")

        assert build_metadata_hint(metadata, enabled=False) == ([], None)
        assert build_metadata_hint(None) == ([], None)


class TestPromptBudgeter:
    """Tests for PromptBudgeter.assemble."""

    def test_generic_template_directives(self, budgeter, base_args):
        """Test that case, length and language directives are present."""
        assembled = budgeter.assemble(**base_args, content="Quarterly numbers")

        assert assembled.prompt.startswith("Generate filename:")
        assert "Use kebabCase" in assembled.prompt
        assert "Max 20 characters" in assembled.prompt
        assert "English only" in assembled.prompt
        assert "Content:\nQuarterly numbers" in assembled.prompt
        assert assembled.budget.content_truncated is False
        assert assembled.prompt_trimmed is False

    def test_sections_in_order(self, budgeter, base_args):
        """Test the order of optional sections."""
        metadata = FileMetadata(created_at="2024-03-05T10:00:00+00:00")

        assembled = budgeter.assemble(
            **base_args,
            content="Body text",
            video_summary="Three frames of a beach",
            metadata=metadata,
            original_filename="IMG_0001.txt",
            custom_prompt="Prefer short names",
        )
        prompt = assembled.prompt

        positions = [
            prompt.index("Respond ONLY with filename."),
            prompt.index("Current filename for context: IMG_0001.txt"),
            prompt.index("File metadata hints:"),
            prompt.index("fall back to the created date"),
            prompt.index("Video summary:"),
            prompt.index("Content:"),
            prompt.index("Custom instructions:\nPrefer short names"),
        ]
        assert positions == sorted(positions)
        assert assembled.filename_hint_included is True
        assert assembled.fallback_date.value == "2024-03-05"

    def test_optional_sections_omitted(self, budgeter, base_args):
        """Test that disabled hints do not appear."""
        assembled = budgeter.assemble(
            **base_args,
            metadata=FileMetadata(created_at="2024-03-05T10:00:00+00:00"),
            metadata_hints=False,
            original_filename="report.pdf",
            use_filename_hint=False,
        )

        assert "File metadata hints:" not in assembled.prompt
        assert "Current filename" not in assembled.prompt
        assert "Content" not in assembled.prompt
        assert assembled.filename_hint_included is False

    def test_pitch_deck_template_with_classifier_hints(self, budgeter, base_args):
        """Test that a focus selects the deck template and adds classifier hints."""
        classification = classify_pitch_deck("Initech LLC\nInvestor Presentation\nSeries A")

        assembled = budgeter.assemble(
            **base_args,
            content="Initech LLC\nInvestor Presentation\nSeries A",
            classification=classification,
            pitch_deck_focus=PitchDeckFocus.ROUND,
        )

        assert assembled.prompt.startswith("You are naming an investor pitch deck.")
        assert "respond with the single word SKIP" in assembled.prompt
        assert "<Company> <Funding Round> Pitch Deck" in assembled.prompt
        assert "Pitch deck analysis:" in assembled.prompt
        assert "Possible company names: Initech" in assembled.prompt
        assert assembled.classifier_hints_included is True

    def test_classifier_hints_need_pitch_deck_mode(self, budgeter, base_args):
        """Test that classifier output is ignored with the generic template."""
        classification = classify_pitch_deck("pitch deck")

        assembled = budgeter.assemble(**base_args, content="pitch deck", classification=classification)

        assert "Pitch deck analysis:" not in assembled.prompt
        assert assembled.classifier_hints_included is False

    def test_long_content_is_truncated(self, budgeter, base_args):
        """Test that content above the content ceiling is cut and labelled as a preview."""
        content = "word " * 10000

        assembled = budgeter.assemble(**base_args, content=content)

        assert len(content) == 50000
        assert assembled.budget.content_truncated is True
        assert len(assembled.budget.content_snippet) <= 8000
        assert assembled.budget.content_original_length == 50000
        assert f"Content preview (first {len(assembled.budget.content_snippet)} of 50000 characters):" in (
            assembled.prompt
        )
        assert len(assembled.prompt) <= 12000
        assert assembled.prompt_trimmed is False

    def test_content_shrinks_before_prompt_is_cut(self, base_args):
        """Test that overflowing prompts shrink the content and keep the instructions."""
        budgeter = PromptBudgeter(max_content_chars=8000, max_prompt_chars=9000)
        content = "sentence one. " * 1000
        custom_prompt = "c" * 2000

        assembled = budgeter.assemble(**base_args, content=content, custom_prompt=custom_prompt)

        assert len(assembled.prompt) <= 9000
        assert assembled.prompt_trimmed is False
        assert assembled.budget.content_truncated is True
        assert assembled.prompt.endswith(custom_prompt)

    def test_prompt_hard_trimmed_when_instructions_overflow(self, budgeter, base_args):
        """Test the last-resort hard cut."""
        assembled = budgeter.assemble(**base_args, content="word " * 10000, custom_prompt="z" * 15000)

        assert assembled.budget.content_truncated is True
        assert assembled.budget.content_snippet == ""
        assert assembled.prompt_trimmed is True
        assert len(assembled.prompt) == 12000
        assert assembled.prompt.startswith("Generate filename:")

    @pytest.mark.parametrize("content_length", [8001, 12000, 20000, 50000])
    @pytest.mark.parametrize("custom_length", [0, 3000, 11000])
    def test_prompt_never_exceeds_ceiling(self, budgeter, base_args, content_length, custom_length):
        """Test the total ceiling across content and instruction sizes."""
        content = ("lorem ipsum dolor sit amet. " * 2000)[:content_length]

        assembled = budgeter.assemble(**base_args, content=content, custom_prompt="p" * custom_length or None)

        assert len(assembled.prompt) <= 12000
        assert assembled.budget.content_truncated is True
        assert len(assembled.budget.content_snippet) < content_length
