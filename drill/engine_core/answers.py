"""
Answer comparison and display helpers.

Equality is case-insensitive and ignores leading/trailing whitespace.
No fuzzy matching, no accent folding.
"""

from __future__ import annotations


def normalize_answer(text: str) -> str:
    """Trim and case-fold for comparison."""
    return text.strip().casefold()


def answers_match(submitted: str, expected: str) -> bool:
    return normalize_answer(submitted) == normalize_answer(expected)


def display_answer(text: str) -> str:
    """First letter upper-cased, the rest unchanged."""
    if not text:
        return text
    return text[0].upper() + text[1:]


def correction_message(expected: str) -> str:
    return f"Correct: {display_answer(expected)}"
