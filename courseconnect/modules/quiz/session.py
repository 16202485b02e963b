"""Quiz session state machine.

``not_started -> in_progress -> reviewing``. Each submitted answer is graded
against the stored key and appended to ``results``; the score is always the
number of correct results.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from courseconnect.modules.flashcards.grading import (
    check_answer,
    check_choice,
    check_exact,
    letter_to_index,
)
from courseconnect.modules.quiz.models import (
    AnswerType,
    QuestionView,
    QuizKind,
    QuizQuestion,
    QuizResult,
    QuizState,
    QuizSummary,
    SessionStatus,
)


class SessionError(ValueError):
    """Base class for session failures."""


class InvalidTransition(SessionError):
    """The action is not allowed in the session's current state."""


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return uuid4().hex[:12]


def percentage(score: int, total: int) -> int:
    if total <= 0:
        return 0
    return round(score / total * 100)


@dataclass
class QuizSession:
    topic: str
    questions: list[QuizQuestion]
    kind: QuizKind = QuizKind.QUESTIONS
    # Saved set the flashcards came from, for study history
    flashcard_set_id: Optional[int] = None
    id: str = field(default_factory=new_session_id)
    status: SessionStatus = SessionStatus.NOT_STARTED
    current_index: int = 0
    results: list[QuizResult] = field(default_factory=list)
    feedback_shown: bool = False
    answer_types: dict[int, AnswerType] = field(default_factory=dict)
    mcq_options: dict[int, list[str]] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_now_utc)
    last_activity: datetime = field(default_factory=_now_utc)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def __post_init__(self) -> None:
        if not self.questions:
            raise SessionError("A quiz needs at least one question")

    # Derived values -----------------------------------------------------
    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def score(self) -> int:
        return sum(1 for r in self.results if r.is_correct)

    @property
    def percentage(self) -> int:
        return percentage(self.score, self.total)

    @property
    def wrong_questions(self) -> list[str]:
        return [r.question for r in self.results if not r.is_correct]

    @property
    def current_question(self) -> QuizQuestion:
        return self.questions[self.current_index]

    def answer_type_for(self, index: int) -> AnswerType:
        if self.kind == QuizKind.QUESTIONS:
            return AnswerType.MCQ if self.questions[index].options else AnswerType.TEXT
        return self.answer_types.get(index, AnswerType.TEXT)

    def options_for(self, index: int) -> Optional[list[str]]:
        if self.kind == QuizKind.QUESTIONS:
            return self.questions[index].options
        if self.answer_type_for(index) == AnswerType.MCQ:
            return self.mcq_options.get(index)
        return None

    def _touch(self) -> None:
        self.last_activity = _now_utc()

    def _require(self, *allowed: SessionStatus) -> None:
        if self.status not in allowed:
            raise InvalidTransition(
                f"Action not allowed while session is {self.status.value}"
            )

    # Transitions --------------------------------------------------------
    def start(self) -> None:
        self._require(SessionStatus.NOT_STARTED)
        self.status = SessionStatus.IN_PROGRESS
        self._touch()

    def set_answer_type(
        self, answer_type: AnswerType, options: Optional[list[str]] = None
    ) -> None:
        """Switch the current flashcard between text and multiple choice.

        MCQ options are fixed per question once set.
        """
        self._require(SessionStatus.NOT_STARTED, SessionStatus.IN_PROGRESS)
        if self.kind != QuizKind.FLASHCARDS:
            raise InvalidTransition("Answer type is fixed for question-bank quizzes")
        if self.feedback_shown:
            raise InvalidTransition("Question already answered")
        idx = self.current_index
        if answer_type == AnswerType.MCQ and idx not in self.mcq_options:
            if not options:
                raise SessionError("MCQ answers need options")
            self.mcq_options[idx] = list(options)
        self.answer_types[idx] = answer_type
        self._touch()

    def submit_answer(self, answer: str) -> QuizResult:
        if self.status == SessionStatus.NOT_STARTED:
            self.start()
        self._require(SessionStatus.IN_PROGRESS)
        if self.feedback_shown:
            raise InvalidTransition("Question already answered")
        if not (answer or "").strip():
            raise SessionError("Answer must not be empty")

        result = self._grade(self.current_index, answer)
        self.results.append(result)
        self.feedback_shown = True
        self._touch()
        return result

    def _grade(self, index: int, answer: str) -> QuizResult:
        q = self.questions[index]
        answer_type = self.answer_type_for(index)
        options = self.options_for(index)
        user_answer = answer
        correct_answer = q.answer

        if self.kind == QuizKind.FLASHCARDS:
            if answer_type == AnswerType.MCQ and options:
                is_correct, user_answer = check_choice(answer, options, q.answer)
            else:
                is_correct = check_answer(answer, q.answer)
        else:
            is_correct = check_exact(answer, q.answer)
            if options:
                key_idx = letter_to_index(q.answer)
                if key_idx is not None and 0 <= key_idx < len(options):
                    correct_answer = options[key_idx]
                picked = letter_to_index(answer)
                if picked is not None and 0 <= picked < len(options):
                    user_answer = options[picked]

        return QuizResult(
            question=q.question,
            user_answer=user_answer,
            correct_answer=correct_answer,
            is_correct=is_correct,
            card_index=index,
            answer_type=answer_type,
        )

    def next(self) -> None:
        """Advance to the next question, or complete after the last one."""
        self._require(SessionStatus.IN_PROGRESS)
        if not self.feedback_shown:
            raise InvalidTransition("Answer the current question first")
        if self.current_index < self.total - 1:
            self.current_index += 1
            self.feedback_shown = False
        else:
            self.status = SessionStatus.REVIEWING
        self._touch()

    def finish(self) -> None:
        """End early and go to review with whatever has been answered."""
        self._require(SessionStatus.IN_PROGRESS)
        self.status = SessionStatus.REVIEWING
        self._touch()

    def restart(self) -> None:
        self.status = SessionStatus.IN_PROGRESS
        self.current_index = 0
        self.results = []
        self.feedback_shown = False
        self.answer_types = {}
        self.mcq_options = {}
        self._touch()

    # Snapshots ----------------------------------------------------------
    def question_results(self) -> list[Optional[str]]:
        marks: list[Optional[str]] = [None] * self.total
        for r in self.results:
            marks[r.card_index] = "correct" if r.is_correct else "incorrect"
        return marks

    def view(self, index: int) -> QuestionView:
        return QuestionView(
            index=index,
            question=self.questions[index].question,
            options=self.options_for(index),
            answer_type=self.answer_type_for(index),
        )

    def to_state(self) -> QuizState:
        current = None
        if self.status != SessionStatus.REVIEWING:
            current = self.view(self.current_index)
        return QuizState(
            id=self.id,
            topic=self.topic,
            kind=self.kind,
            status=self.status,
            current_index=self.current_index,
            total_questions=self.total,
            current=current,
            feedback_shown=self.feedback_shown,
            last_result=self.results[-1] if self.feedback_shown and self.results else None,
            score=self.score,
            answered=len(self.results),
            question_results=self.question_results(),
        )

    def summary(self) -> QuizSummary:
        return QuizSummary(
            id=self.id,
            topic=self.topic,
            score=self.score,
            total=self.total,
            percentage=self.percentage,
            wrong_questions=self.wrong_questions,
            results=list(self.results),
        )
