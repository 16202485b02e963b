"""Multiple-choice options: AI-generated first, heuristics as the fallback."""

from __future__ import annotations

import random
from typing import Optional

from pydantic_ai import Agent

from courseconnect.core.logging import get_logger
from courseconnect.modules.llm import build_model
from courseconnect.modules.flashcards.distractors import (
    OPTION_COUNT,
    build_options,
    finalize_options,
)
from courseconnect.modules.flashcards.models.flashcards import OptionSet

logger = get_logger(__name__)


SYSTEM_PROMPT = (
    "You are an expert at creating realistic multiple choice question options "
    "for educational tests. Return a JSON object that validates as OptionSet: "
    "{options}. Rules: "
    f"- Return exactly {OPTION_COUNT} options: the correct answer verbatim plus "
    f"  {OPTION_COUNT - 1} wrong answers (distractors). "
    "- Distractors are grammatically correct, plausible, related to the topic "
    "  but factually incorrect, and similar in length and style to the correct "
    "  answer. "
    "- Never write obviously wrong options such as 'Not X' or 'Alternative to X'. "
    "- Shuffle the order so the correct answer is not always first."
)


def _build_instruction(question: str, correct_answer: str) -> str:
    return (
        "Generate multiple choice options for the question below.\n\n"
        f"Question: {question}\n"
        f"Correct Answer: {correct_answer}"
    )


async def generate_ai_options(question: str, correct_answer: str) -> list[str]:
    agent: Agent[None, OptionSet] = Agent[None, OptionSet](
        model=build_model(),
        output_type=OptionSet,
        system_prompt=SYSTEM_PROMPT,
        retries=2,
    )
    res = await agent.run(_build_instruction(question, correct_answer))
    return [str(o) for o in res.output.options]


def _valid_ai_options(options: list[str], correct_answer: str) -> bool:
    cleaned = [o.strip() for o in options]
    return (
        len(cleaned) == OPTION_COUNT
        and all(cleaned)
        and len(set(cleaned)) == OPTION_COUNT
        and correct_answer.strip() in cleaned
    )


async def generate_options(
    question: str,
    correct_answer: str,
    *,
    use_ai: bool = True,
    rng: Optional[random.Random] = None,
) -> tuple[list[str], str]:
    """Return ``(options, source)`` where source is ``"ai"`` or ``"heuristic"``."""
    correct = correct_answer.strip()
    if use_ai:
        try:
            options = await generate_ai_options(question, correct)
            if _valid_ai_options(options, correct):
                return finalize_options(correct, options, rng=rng), "ai"
            logger.warning("AI options rejected for %r: %r", question, options)
        except Exception as e:  # noqa: BLE001
            logger.warning(f"AI options failed, using heuristics: {e}")
    return build_options(correct, question, rng=rng), "heuristic"
