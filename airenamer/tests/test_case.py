"""Tests for case style transforms."""

import pytest

from airenamer.case import change_case, split_words
from airenamer.models.config import CaseStyle


@pytest.mark.parametrize(
    "style,expected",
    [
        (CaseStyle.KEBAB, "q3-budget-review"),
        (CaseStyle.CAMEL, "q3BudgetReview"),
        (CaseStyle.PASCAL, "Q3BudgetReview"),
        (CaseStyle.PASCAL_SNAKE, "Q3_Budget_Review"),
        (CaseStyle.SNAKE, "q3_budget_review"),
        (CaseStyle.CONSTANT, "Q3_BUDGET_REVIEW"),
        (CaseStyle.CAPITAL, "Q3 Budget Review"),
        (CaseStyle.TRAIN, "Q3-Budget-Review"),
        (CaseStyle.SENTENCE, "Q3 budget review"),
        (CaseStyle.DOT, "q3.budget.review"),
        (CaseStyle.NO, "q3 budget review"),
    ],
)
def test_change_case_styles(style, expected):
    assert change_case("Q3 Budget Review", style) == expected


def test_split_words_breaks_humps():
    """Test camel humps, acronyms and digit-letter boundaries."""
    assert split_words("fooBar XMLHttpRequest q3Report") == ["foo", "Bar", "XML", "Http", "Request", "q3", "Report"]


def test_split_words_on_separators():
    assert split_words("hello_world-again.now") == ["hello", "world", "again", "now"]


def test_camel_case_keeps_digit_words_readable():
    assert change_case("version 2 notes", CaseStyle.CAMEL) == "version_2Notes"


def test_change_case_accepts_style_value():
    assert change_case("Team Offsite", "snakeCase") == "team_offsite"


def test_change_case_keeps_unicode_letters():
    assert change_case("Café Menü", CaseStyle.KEBAB) == "café-menü"


@pytest.mark.parametrize("text", ["", "!!!", "  -_- "])
def test_change_case_without_words(text):
    assert change_case(text, CaseStyle.KEBAB) == ""
