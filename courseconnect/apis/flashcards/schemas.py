from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from courseconnect.apis.common import CamelModel
from courseconnect.modules.quiz.models import AnswerType


class GenerateFlashcardsRequest(CamelModel):
    topic: Optional[str] = None
    class_name: Optional[str] = None
    chat_history: Optional[str] = None
    context: Optional[str] = None


class FlashcardItem(CamelModel):
    question: str
    answer: str


class GenerateFlashcardsResponse(CamelModel):
    flashcards: list[FlashcardItem]


class GenerateOptionsRequest(CamelModel):
    question: str = Field(..., min_length=1)
    correct_answer: str = Field(..., min_length=1)
    use_ai: bool = True


class GenerateOptionsResponse(CamelModel):
    options: list[str]
    # "ai" | "heuristic"
    source: str


class CheckAnswerRequest(CamelModel):
    user_answer: str
    correct_answer: str
    answer_type: AnswerType = AnswerType.TEXT
    options: Optional[list[str]] = None


class CheckAnswerResponse(CamelModel):
    is_correct: bool
    user_answer: str
    correct_answer: str


class SaveFlashcardSetRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    topic: str = "General"
    flashcards: list[FlashcardItem] = Field(..., min_length=1)


class StudyStats(CamelModel):
    total_studies: int = 0
    correct_answers: int = 0
    last_studied: Optional[datetime] = None


class FlashcardRead(CamelModel):
    id: int
    question: str
    answer: str
    order_index: int


class FlashcardSetSummary(CamelModel):
    id: int
    title: str
    topic: str
    card_count: int
    created_at: datetime
    study_stats: StudyStats


class FlashcardSetRead(FlashcardSetSummary):
    flashcards: list[FlashcardRead]
