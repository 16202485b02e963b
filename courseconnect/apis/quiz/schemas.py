from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from courseconnect.apis.common import CamelModel
from courseconnect.apis.flashcards.schemas import FlashcardItem
from courseconnect.modules.quiz.models import (
    AnswerType,
    QuizQuestion,
    QuizResult,
    QuizState,
)


class CreateQuizRequest(CamelModel):
    """Either a question bank or a list of flashcards to quiz on."""

    topic: str = "General"
    questions: Optional[list[QuizQuestion]] = None
    flashcards: Optional[list[FlashcardItem]] = None
    flashcard_set_id: Optional[int] = None
    start: bool = True

    @model_validator(mode="after")
    def _one_source(self):
        if bool(self.questions) == bool(self.flashcards):
            raise ValueError("Provide either questions or flashcards")
        return self


class AnswerRequest(CamelModel):
    answer: str = Field(..., min_length=1)


class AnswerResponse(CamelModel):
    result: QuizResult
    state: QuizState


class AnswerTypeRequest(CamelModel):
    answer_type: AnswerType
    # Use these instead of generating options
    options: Optional[list[str]] = None
