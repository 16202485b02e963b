"""In-memory registry for quiz and exam sessions.

Sessions live in-process only. A background sweep drops sessions that have
been idle longer than the configured window. An exam whose countdown is still
running is left for its timer to submit; exam timers are cancelled when their
session is dropped or the manager stops.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from courseconnect.core.logging import get_logger
from courseconnect.modules.quiz.exam import DEFAULT_TIME_LIMIT_MINUTES, ExamSession
from courseconnect.modules.quiz.models import (
    ExamResult,
    QuizKind,
    QuizQuestion,
    SessionStatus,
)
from courseconnect.modules.quiz.session import QuizSession, SessionError

logger = get_logger(__name__)


class SessionNotFound(SessionError):
    pass


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class SessionManager:
    def __init__(self) -> None:
        self.quizzes: dict[str, QuizSession] = {}
        self.exams: dict[str, ExamSession] = {}
        self._cleanup_task: Optional[asyncio.Task] = None
        self._idle_seconds: int = 1800
        self._sweep_interval: int = 60

    # Quizzes ------------------------------------------------------------
    def create_quiz(
        self,
        *,
        topic: str,
        questions: list[QuizQuestion],
        kind: QuizKind = QuizKind.QUESTIONS,
        flashcard_set_id: Optional[int] = None,
    ) -> QuizSession:
        session = QuizSession(
            topic=topic,
            questions=questions,
            kind=kind,
            flashcard_set_id=flashcard_set_id,
        )
        self.quizzes[session.id] = session
        logger.info(
            "Created %s quiz %s with %d questions", kind.value, session.id, session.total
        )
        return session

    def get_quiz(self, session_id: str) -> QuizSession:
        session = self.quizzes.get(session_id)
        if session is None:
            raise SessionNotFound("quiz_not_found")
        return session

    def drop_quiz(self, session_id: str) -> None:
        self.quizzes.pop(session_id, None)

    # Exams --------------------------------------------------------------
    def create_exam(
        self,
        *,
        topic: str,
        questions: list[QuizQuestion],
        time_limit_minutes: int = DEFAULT_TIME_LIMIT_MINUTES,
        on_complete: Optional[Callable[[ExamResult], None]] = None,
        start: bool = True,
        tick_seconds: float = 1.0,
    ) -> ExamSession:
        exam = ExamSession(
            topic=topic,
            questions=questions,
            time_limit_minutes=time_limit_minutes,
            on_complete=on_complete,
        )
        self.exams[exam.id] = exam
        if start:
            exam.start(tick_seconds=tick_seconds)
        logger.info(
            "Created exam %s (%d questions, %d min)",
            exam.id,
            exam.total,
            exam.time_limit_minutes,
        )
        return exam

    def get_exam(self, exam_id: str) -> ExamSession:
        exam = self.exams.get(exam_id)
        if exam is None:
            raise SessionNotFound("exam_not_found")
        return exam

    def drop_exam(self, exam_id: str) -> None:
        exam = self.exams.pop(exam_id, None)
        if exam is not None:
            exam.stop_timer()

    # Cleanup loop -------------------------------------------------------
    def sweep(self, now: Optional[datetime] = None) -> int:
        """Drop idle sessions; returns how many were removed."""
        now = now or _now_utc()
        removed = 0
        for sid, quiz in list(self.quizzes.items()):
            if (now - quiz.last_activity).total_seconds() > self._idle_seconds:
                self.drop_quiz(sid)
                removed += 1
        for eid, exam in list(self.exams.items()):
            if (now - exam.last_activity).total_seconds() <= self._idle_seconds:
                continue
            if exam.status == SessionStatus.IN_PROGRESS:
                # a live countdown submits the exam itself when it reaches zero
                if exam.timer_running:
                    continue
                logger.info(
                    "Submitting idle exam before drop", extra={"session_id": eid}
                )
                exam.submit()
            self.drop_exam(eid)
            removed += 1
        if removed:
            logger.info("Swept %d idle sessions", removed)
        return removed

    def start(self, *, idle_seconds: int = 1800, sweep_interval: int = 60) -> None:
        self._idle_seconds = max(60, int(idle_seconds))
        self._sweep_interval = max(5, int(sweep_interval))
        if self._cleanup_task and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None
        for exam in self.exams.values():
            exam.stop_timer()

    async def _cleanup_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._sweep_interval)
                self.sweep()
        except asyncio.CancelledError:
            return


# Singleton manager used by the API layer
session_manager = SessionManager()
