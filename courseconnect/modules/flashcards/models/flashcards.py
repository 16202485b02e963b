"""Pydantic models for flashcard generation and validation.

Note: To keep the structured output schema simple and provider compatible,
we avoid complex constraints (min/max lengths, formats, etc.). Validation is
applied post-generation.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Flashcard(BaseModel):
    """Simple question/answer flashcard."""

    question: str
    answer: str


class FlashcardDeck(BaseModel):
    """Structured output of the flashcard agent."""

    flashcards: list[Flashcard] = Field(default_factory=list)


class GenerateFlashcardsInput(BaseModel):
    """Context for a generation call: a topic, a class chat, or free notes."""

    topic: Optional[str] = None
    class_name: Optional[str] = None
    chat_history: Optional[str] = None
    context: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(
            (v or "").strip()
            for v in (self.topic, self.class_name, self.chat_history, self.context)
        )


class OptionSet(BaseModel):
    """Structured output of the multiple-choice options agent."""

    options: list[str] = Field(default_factory=list)
