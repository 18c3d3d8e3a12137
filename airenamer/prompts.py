# ruff: noqa: E501
"""Prompts used in conjunction with LLMs for naming files."""

from airenamer.models.config import PitchDeckFocus


# Instructions for naming an arbitrary document, image or video. Used by the PromptBudgeter.
FILENAME_PROMPT_TEMPLATE = """Generate filename:

Use {case_style}
Max {chars} characters
{language} only
No file extension
No special chars
Only key elements
One word if possible
Noun-verb format

Respond ONLY with filename."""


# Instructions for naming a document the classifier believes is an investor pitch deck.
# The model may decline with SKIP, which the ResponseResolver treats as a deliberate skip.
PITCH_DECK_PROMPT_TEMPLATE = """You are naming an investor pitch deck.

If the material below is NOT a startup or fundraising pitch deck, respond with the single word SKIP.
Otherwise generate a filename following the pattern: {pattern}

Use {case_style}
Max {chars} characters
{language} only
No file extension
No special chars
Use the company name exactly as the deck presents it
Do not invent a company name, round or year that is not in the material

Respond ONLY with SKIP or the filename."""


PITCH_DECK_PATTERNS = {
    PitchDeckFocus.COMPANY: "<Company> Pitch Deck",
    PitchDeckFocus.ROUND: "<Company> <Funding Round> Pitch Deck (omit the round if none is stated)",
    PitchDeckFocus.DATE: "<Company> Pitch Deck <Year> (omit the year if none is stated)",
}
