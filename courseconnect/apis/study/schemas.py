from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from courseconnect.apis.common import CamelModel
from courseconnect.modules.quiz.models import AnswerType


class StudySessionCreate(CamelModel):
    question: str = Field(..., min_length=1)
    user_answer: str
    correct_answer: str
    answer_type: AnswerType = AnswerType.TEXT
    options: Optional[list[str]] = None
    flashcard_set_id: Optional[int] = None
    set_title: str = "Generated Flashcards"
    topic: str = "General"
    difficulty: str = "Medium"
    # Grade server side when omitted
    is_correct: Optional[bool] = None


class StudySessionRead(CamelModel):
    id: int
    flashcard_set_id: Optional[int] = None
    set_title: str
    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    answer_type: str
    difficulty: str
    topic: str
    created_at: datetime


class StudyStatsRead(CamelModel):
    total_answers: int
    correct_answers: int
    accuracy: int
    saved_sets: int
    last_studied: Optional[datetime] = None
