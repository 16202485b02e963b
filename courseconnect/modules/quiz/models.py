"""Pydantic models for quiz and exam sessions.

Sessions themselves are in-memory dataclasses (see ``session`` and ``exam``);
these models are the typed snapshots handed to the API layer.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SessionStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    REVIEWING = "reviewing"
    SUBMITTED = "submitted"


class QuizKind(str, Enum):
    # Flashcards graded leniently (text) or by option text (mcq)
    FLASHCARDS = "flashcards"
    # Question bank items graded by exact key match
    QUESTIONS = "questions"


class AnswerType(str, Enum):
    TEXT = "text"
    MCQ = "mcq"


class QuizQuestion(_Model):
    """A question with an answer key; ``options`` makes it multiple choice.

    For question-bank items with options, ``answer`` is the letter of the
    correct option (``"A"``..``"D"``).
    """

    question: str
    answer: str
    options: Optional[list[str]] = None
    explanation: Optional[str] = None


class QuizResult(_Model):
    question: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    card_index: int
    answer_type: AnswerType = AnswerType.TEXT


class QuestionView(_Model):
    """What a student sees for the current question (no answer key)."""

    index: int
    question: str
    options: Optional[list[str]] = None
    answer_type: AnswerType = AnswerType.TEXT


class QuizState(_Model):
    id: str
    topic: str
    kind: QuizKind
    status: SessionStatus
    current_index: int
    total_questions: int
    current: Optional[QuestionView] = None
    feedback_shown: bool = False
    last_result: Optional[QuizResult] = None
    score: int = 0
    answered: int = 0
    # Per-question marker: "correct" | "incorrect" | None
    question_results: list[Optional[str]] = Field(default_factory=list)


class QuizSummary(_Model):
    id: str
    topic: str
    score: int
    total: int
    percentage: int
    wrong_questions: list[str] = Field(default_factory=list)
    results: list[QuizResult] = Field(default_factory=list)


class ExamQuestionReview(_Model):
    index: int
    question: str
    user_answer: Optional[str] = None
    correct_answer: str
    is_correct: bool
    explanation: Optional[str] = None


class ExamResult(_Model):
    score: int
    total: int
    percentage: int
    timed_out: bool = False
    review: list[ExamQuestionReview] = Field(default_factory=list)


class ExamState(_Model):
    id: str
    topic: str
    status: SessionStatus
    current_index: int
    total_questions: int
    current: Optional[QuestionView] = None
    answers: dict[int, str] = Field(default_factory=dict)
    answered_count: int = 0
    progress_percent: float = 0.0
    time_limit_minutes: int
    time_left_seconds: int
    time_left_display: str
    result: Optional[ExamResult] = None
