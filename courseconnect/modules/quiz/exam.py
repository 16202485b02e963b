"""Timed full-exam session.

Answers are kept per question index so the student can move freely between
questions. A countdown ticks once per second and force-submits at zero.
``submit`` is idempotent: whichever of the student or the timer gets there
first computes the result and fires ``on_complete``; later calls return the
same result.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from courseconnect.core.logging import get_logger
from courseconnect.modules.flashcards.grading import check_exact, letter_to_index
from courseconnect.modules.quiz.models import (
    AnswerType,
    ExamQuestionReview,
    ExamResult,
    ExamState,
    QuestionView,
    QuizQuestion,
    SessionStatus,
)
from courseconnect.modules.quiz.session import (
    InvalidTransition,
    SessionError,
    new_session_id,
    percentage,
)

logger = get_logger(__name__)

DEFAULT_TIME_LIMIT_MINUTES = 30


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def format_time(seconds: int) -> str:
    seconds = max(0, int(seconds))
    mins, secs = divmod(seconds, 60)
    return f"{mins}:{secs:02d}"


@dataclass
class ExamSession:
    topic: str
    questions: list[QuizQuestion]
    time_limit_minutes: int = DEFAULT_TIME_LIMIT_MINUTES
    id: str = field(default_factory=new_session_id)
    status: SessionStatus = SessionStatus.NOT_STARTED
    current_index: int = 0
    answers: dict[int, str] = field(default_factory=dict)
    time_left: int = 0
    result: Optional[ExamResult] = None
    on_complete: Optional[Callable[[ExamResult], None]] = field(default=None, repr=False)
    created_at: datetime = field(default_factory=_now_utc)
    last_activity: datetime = field(default_factory=_now_utc)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    _timer_task: Optional[asyncio.Task] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.questions:
            raise SessionError("An exam needs at least one question")
        self.time_limit_minutes = max(1, int(self.time_limit_minutes))
        self.time_left = self.time_limit_minutes * 60

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    @property
    def progress_percent(self) -> float:
        return round(self.answered_count / self.total * 100, 2)

    def _touch(self) -> None:
        self.last_activity = _now_utc()

    def _require_open(self) -> None:
        if self.status == SessionStatus.SUBMITTED:
            raise InvalidTransition("Exam already submitted")

    # Lifecycle ----------------------------------------------------------
    def start(self, *, tick_seconds: float = 1.0) -> None:
        """Open the exam and start the countdown (needs a running loop)."""
        if self.status != SessionStatus.NOT_STARTED:
            return
        self.status = SessionStatus.IN_PROGRESS
        self._touch()
        self._timer_task = asyncio.create_task(self._run_timer(tick_seconds))

    async def _run_timer(self, tick_seconds: float) -> None:
        try:
            while self.status == SessionStatus.IN_PROGRESS:
                await asyncio.sleep(tick_seconds)
                self.tick()
        except asyncio.CancelledError:
            return

    def tick(self) -> None:
        """One second elapses; at zero the exam is force-submitted."""
        if self.status != SessionStatus.IN_PROGRESS:
            return
        if self.time_left <= 1:
            self.time_left = 0
            logger.info("Exam timed out; submitting", extra={"session_id": self.id})
            self.submit(timed_out=True)
            return
        self.time_left -= 1

    @property
    def timer_running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def stop_timer(self) -> None:
        task = self._timer_task
        self._timer_task = None
        if task and not task.done() and task is not _current_task():
            task.cancel()

    # Answers and navigation ---------------------------------------------
    def set_answer(self, index: int, answer: str) -> None:
        self._require_open()
        if not 0 <= index < self.total:
            raise SessionError(f"Question index {index} out of range")
        if self.status == SessionStatus.NOT_STARTED:
            raise InvalidTransition("Exam has not started")
        self.answers[index] = answer
        self._touch()

    def goto(self, index: int) -> None:
        self._require_open()
        if not 0 <= index < self.total:
            raise SessionError(f"Question index {index} out of range")
        self.current_index = index
        self._touch()

    def previous(self) -> None:
        self.goto(max(0, self.current_index - 1))

    def next(self) -> None:
        self.goto(min(self.total - 1, self.current_index + 1))

    # Grading ------------------------------------------------------------
    def _correct_text(self, q: QuizQuestion) -> str:
        if q.options:
            idx = letter_to_index(q.answer)
            if idx is not None and 0 <= idx < len(q.options):
                return q.options[idx]
        return q.answer

    def _review(self) -> list[ExamQuestionReview]:
        out: list[ExamQuestionReview] = []
        for i, q in enumerate(self.questions):
            given = self.answers.get(i)
            out.append(
                ExamQuestionReview(
                    index=i,
                    question=q.question,
                    user_answer=given,
                    correct_answer=self._correct_text(q),
                    is_correct=check_exact(given, q.answer),
                    explanation=q.explanation,
                )
            )
        return out

    def submit(self, *, timed_out: bool = False) -> ExamResult:
        if self.result is not None:
            return self.result
        if self.status == SessionStatus.NOT_STARTED:
            self.status = SessionStatus.IN_PROGRESS
        review = self._review()
        score = sum(1 for r in review if r.is_correct)
        self.result = ExamResult(
            score=score,
            total=self.total,
            percentage=percentage(score, self.total),
            timed_out=timed_out,
            review=review,
        )
        self.status = SessionStatus.SUBMITTED
        self.stop_timer()
        self._touch()
        if self.on_complete is not None:
            try:
                self.on_complete(self.result)
            except Exception as e:  # noqa: BLE001
                logger.error(f"Exam completion callback failed: {e}")
        return self.result

    def retake(self, *, tick_seconds: float = 1.0) -> None:
        self.stop_timer()
        self.answers = {}
        self.current_index = 0
        self.time_left = self.time_limit_minutes * 60
        self.result = None
        self.status = SessionStatus.NOT_STARTED
        self.start(tick_seconds=tick_seconds)

    # Snapshots ----------------------------------------------------------
    def view(self, index: int) -> QuestionView:
        q = self.questions[index]
        return QuestionView(
            index=index,
            question=q.question,
            options=q.options,
            answer_type=AnswerType.MCQ if q.options else AnswerType.TEXT,
        )

    def to_state(self) -> ExamState:
        return ExamState(
            id=self.id,
            topic=self.topic,
            status=self.status,
            current_index=self.current_index,
            total_questions=self.total,
            current=self.view(self.current_index),
            answers=dict(self.answers),
            answered_count=self.answered_count,
            progress_percent=self.progress_percent,
            time_limit_minutes=self.time_limit_minutes,
            time_left_seconds=self.time_left,
            time_left_display=format_time(self.time_left),
            result=self.result,
        )


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
