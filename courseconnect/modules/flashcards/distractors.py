"""Heuristic multiple-choice distractors for flashcard answers.

The cascade is ordered and the first matching rule wins:

1. domain keywords in the question (photosynthesis, water, chemical formula)
2. numeric answers: +1, -1 and x2
3. short answers (two words or fewer): negated phrasings
4. longer answers: whole-word substitutions (is/was, the/a, and/or)

``build_options`` always returns exactly ``OPTION_COUNT`` unique options that
include the correct answer, padding with ``Option N`` when the cascade comes up
short.
"""

from __future__ import annotations

import math
import random
import re
from typing import Callable, Optional

OPTION_COUNT = 4

PHOTOSYNTHESIS_DISTRACTORS = (
    "CO₂ + H₂O → C₆H₁₂O₆ + O₂",
    "6CO₂ + 6H₂O → C₆H₁₂O₆ + 3O₂",
    "3CO₂ + 3H₂O → C₆H₁₂O₆ + 3O₂",
)
WATER_DISTRACTORS = ("H₂O₂", "H₂", "O₂")
FORMULA_DISTRACTORS = ("CO₂", "CH₄", "NH₃")

_VERB_TENSE = {"is": "was", "are": "were"}
_ARTICLES = {"the": "a", "a": "the"}
_CONJUNCTIONS = {"and": "or", "or": "and"}


def parse_number(text: str) -> Optional[float]:
    """Return the value of a plain numeric answer, or None."""
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(round(value, 10))


def _swap_words(text: str, mapping: dict[str, str]) -> str:
    pattern = re.compile(
        r"\b(" + "|".join(re.escape(w) for w in mapping) + r")\b", re.IGNORECASE
    )

    def _repl(m: re.Match) -> str:
        word = m.group(0)
        swapped = mapping[word.lower()]
        if word[0].isupper():
            return swapped[0].upper() + swapped[1:]
        return swapped

    return pattern.sub(_repl, text)


def _domain_distractors(question: str) -> Optional[list[str]]:
    q = question.lower()
    if "photosynthesis" in q:
        return list(PHOTOSYNTHESIS_DISTRACTORS)
    if "water" in q or "h2o" in q or "h₂o" in q:
        return list(WATER_DISTRACTORS)
    if "chemical" in q or "formula" in q:
        return list(FORMULA_DISTRACTORS)
    return None


def _numeric_distractors(answer: str) -> Optional[list[str]]:
    value = parse_number(answer)
    if value is None:
        return None
    out: list[str] = []
    for candidate in (value + 1, value - 1, value * 2):
        # float precision (e.g. 1e20 + 1) or zero can collapse onto the answer
        if candidate == value or not math.isfinite(candidate):
            continue
        out.append(format_number(candidate))
    return out


def _short_phrase_distractors(answer: str) -> Optional[list[str]]:
    if len(answer.split()) > 2:
        return None
    return [f"Not {answer}", f"Alternative to {answer}", f"Different from {answer}"]


def _substitution_distractors(answer: str) -> list[str]:
    return [
        _swap_words(answer, _VERB_TENSE),
        _swap_words(answer, _ARTICLES),
        _swap_words(answer, _CONJUNCTIONS),
    ]


def generate_distractors(answer: str, question: str = "") -> list[str]:
    """Run the cascade and return its raw candidates (may contain repeats)."""
    answer = answer.strip()
    rules: list[Callable[[], Optional[list[str]]]] = [
        lambda: _domain_distractors(question),
        lambda: _numeric_distractors(answer),
        lambda: _short_phrase_distractors(answer),
    ]
    for rule in rules:
        found = rule()
        if found is not None:
            return found
    return _substitution_distractors(answer)


def finalize_options(
    correct: str,
    candidates: list[str],
    *,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """Dedupe, pad to ``OPTION_COUNT`` and shuffle, keeping ``correct`` in."""
    correct_value = parse_number(correct)
    options = [correct]
    for c in candidates:
        c = str(c).strip()
        if not c or c in options:
            continue
        if correct_value is not None and parse_number(c) == correct_value:
            continue
        options.append(c)
        if len(options) == OPTION_COUNT:
            break

    n = len(options) + 1
    while len(options) < OPTION_COUNT:
        pad = f"Option {n}"
        if pad not in options:
            options.append(pad)
        n += 1

    (rng or random).shuffle(options)
    return options


def build_options(
    correct: str,
    question: str = "",
    *,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """Four shuffled unique options for ``correct`` using only heuristics."""
    correct = correct.strip()
    return finalize_options(correct, generate_distractors(correct, question), rng=rng)
