"""Answer grading for flashcards, quizzes and exams.

Free-text flashcard answers are graded leniently: after normalization a
match is accepted when either answer contains the other. A one-word answer
that happens to appear inside a longer correct answer is therefore marked
correct; that is accepted behaviour.
"""

from __future__ import annotations

import re
from typing import Optional

MIN_ANSWER_LENGTH = 2

SUBSCRIPT_DIGITS = str.maketrans("₀₁₂₃₄₅₆₇₈₉", "0123456789")
_NON_WORD = re.compile(r"[^\w\s]")


def normalize_answer(text: str) -> str:
    """Lower-case, map subscript digits to ASCII, strip punctuation."""
    lowered = (text or "").lower().translate(SUBSCRIPT_DIGITS)
    return _NON_WORD.sub("", lowered).strip()


def _contains_either_way(a: str, b: str) -> bool:
    return a in b or b in a


def check_answer(user_answer: str, correct_answer: str) -> bool:
    """Lenient free-text grading with bidirectional containment."""
    if not (user_answer or "").strip():
        return False

    normalized_user = normalize_answer(user_answer)
    normalized_correct = normalize_answer(correct_answer)

    if len(normalized_user) < MIN_ANSWER_LENGTH:
        return False

    if normalized_correct and _contains_either_way(normalized_user, normalized_correct):
        return True

    raw_user = user_answer.lower()
    raw_correct = (correct_answer or "").lower()
    return bool(raw_correct) and _contains_either_way(raw_user, raw_correct)


def letter_to_index(letter: str) -> Optional[int]:
    """``"A"`` -> 0, ``"b"`` -> 1; None for anything that is not one letter."""
    s = (letter or "").strip()
    if len(s) != 1 or not s.isalpha():
        return None
    return ord(s.upper()) - ord("A")


def index_to_letter(index: int) -> str:
    return chr(ord("A") + index)


def resolve_choice(answer: str, options: list[str]) -> Optional[str]:
    """Map a letter (or the option text itself) to the chosen option."""
    idx = letter_to_index(answer)
    if idx is not None:
        return options[idx] if 0 <= idx < len(options) else None
    text = (answer or "").strip()
    return text if text in options else None


def check_choice(answer: str, options: list[str], correct_answer: str) -> tuple[bool, str]:
    """Grade a multiple-choice pick; returns (is_correct, chosen option text)."""
    chosen = resolve_choice(answer, options)
    if chosen is None:
        return False, answer
    return chosen == correct_answer, chosen


def check_exact(user_answer: Optional[str], key: str) -> bool:
    """Trimmed, case-insensitive equality used for question-bank quizzes."""
    if user_answer is None:
        return False
    return user_answer.strip().lower() == (key or "").strip().lower()
