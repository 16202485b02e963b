"""Flashcard generator using pydantic-ai.

Exposes an async function that returns validated flashcards for a topic, a
class chat history, or free-form notes.
"""

from __future__ import annotations

from pydantic_ai import Agent

from courseconnect.core.logging import get_logger
from courseconnect.modules.llm import build_model
from courseconnect.modules.flashcards.models.flashcards import (
    Flashcard,
    FlashcardDeck,
    GenerateFlashcardsInput,
)

logger = get_logger(__name__)

MIN_CARDS = 5
MAX_CARDS = 15

SYSTEM_PROMPT = (
    "You are an expert at creating study materials for college students. "
    "Return a single JSON object that validates as the provided FlashcardDeck "
    "model: {flashcards}. Each flashcard has {question, answer}. Rules: "
    "- Prioritize the most important concepts in the provided context. "
    "- Each question is clear and atomic; each answer concise and accurate. "
    "- Wrap mathematical expressions in LaTeX delimiters: $...$ inline, "
    "  $$...$$ for block equations. "
    f"- Generate between {MIN_CARDS} and {MAX_CARDS} flashcards. "
    "- If the context is too thin to study from, return an empty list. "
    "- No extra keys or commentary; do not include code fences."
)


def _build_instruction(data: GenerateFlashcardsInput) -> str:
    parts = ["Create flashcards from the information below."]
    if data.class_name:
        parts.append(f"The flashcards are for the class: {data.class_name}.")
    if data.chat_history:
        parts.append(
            "Here is the recent chat history. Use the questions asked and answers "
            "provided to identify key topics students are focusing on.\n"
            f"---\n{data.chat_history}\n---"
        )
    if data.topic:
        parts.append(f"Generate flashcards for the following topic: {data.topic}.")
    if data.context:
        parts.append(
            f"Also use the following notes or content:\n---\n{data.context}\n---"
        )
    return "\n\n".join(parts)


def _build_agent() -> Agent[None, FlashcardDeck]:
    return Agent[None, FlashcardDeck](
        model=build_model(),
        output_type=FlashcardDeck,
        system_prompt=SYSTEM_PROMPT,
        retries=3,
    )


async def generate_flashcards(data: GenerateFlashcardsInput) -> list[Flashcard]:
    """Generate flashcards; an empty list means there was not enough context."""
    agent = _build_agent()
    res = await agent.run(_build_instruction(data))
    cards = postprocess(res.output)
    logger.info(
        "Generated %d flashcards (topic=%r, class=%r)",
        len(cards),
        data.topic,
        data.class_name,
    )
    return cards


def postprocess(deck: FlashcardDeck) -> list[Flashcard]:
    """Strip whitespace, drop incomplete or repeated cards, cap the count."""
    seen: set[str] = set()
    out: list[Flashcard] = []
    for c in deck.flashcards or []:
        q = (c.question or "").strip()
        a = (c.answer or "").strip()
        if not q or not a:
            continue
        key = q.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(Flashcard(question=q, answer=a))
    return out[:MAX_CARDS]
