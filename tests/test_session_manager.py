import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from courseconnect.core.cache import ProfileCache, profile_key
from courseconnect.modules.quiz import (
    QuizKind,
    QuizQuestion,
    SessionManager,
    SessionNotFound,
    SessionStatus,
)

QUESTIONS = [QuizQuestion(question="Capital of France?", answer="Paris")]


class TestSessionManager:
    def test_create_and_get(self):
        manager = SessionManager()
        quiz = manager.create_quiz(
            topic="Geo", questions=QUESTIONS, kind=QuizKind.FLASHCARDS, flashcard_set_id=3
        )
        assert manager.get_quiz(quiz.id) is quiz
        assert quiz.flashcard_set_id == 3

    def test_unknown_ids(self):
        manager = SessionManager()
        with pytest.raises(SessionNotFound):
            manager.get_quiz("missing")
        with pytest.raises(SessionNotFound):
            manager.get_exam("missing")

    def test_sweep_drops_idle_sessions(self):
        manager = SessionManager()
        idle = manager.create_quiz(topic="Old", questions=QUESTIONS)
        fresh = manager.create_quiz(topic="New", questions=QUESTIONS)
        exam = manager.create_exam(topic="Old exam", questions=QUESTIONS, start=False)
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        idle.last_activity = past
        exam.last_activity = past

        assert manager.sweep() == 2
        assert list(manager.quizzes) == [fresh.id]
        assert manager.exams == {}

    def test_sweep_keeps_running_exam(self):
        async def run():
            manager = SessionManager()
            fired = []
            exam = manager.create_exam(
                topic="Long exam",
                questions=QUESTIONS,
                time_limit_minutes=60,
                on_complete=fired.append,
                tick_seconds=3600,
            )
            exam.set_answer(0, "Paris")
            removed = manager.sweep(exam.last_activity + timedelta(minutes=31))
            state = (removed, exam.id in manager.exams, exam.status, exam.timer_running)
            await manager.stop()
            return state, fired

        (removed, registered, status, running), fired = asyncio.run(run())
        assert removed == 0
        assert registered is True
        assert status == SessionStatus.IN_PROGRESS
        assert running is True
        assert fired == []

    def test_sweep_submits_stalled_exam_once(self):
        async def run():
            manager = SessionManager()
            fired = []
            exam = manager.create_exam(
                topic="Stalled",
                questions=QUESTIONS,
                on_complete=fired.append,
                tick_seconds=3600,
            )
            exam.set_answer(0, "Paris")
            exam.stop_timer()
            await asyncio.sleep(0)
            removed = manager.sweep(exam.last_activity + timedelta(hours=1))
            return removed, exam, fired

        removed, exam, fired = asyncio.run(run())
        assert removed == 1
        assert exam.status == SessionStatus.SUBMITTED
        assert len(fired) == 1
        assert fired[0].score == 1

    def test_sweep_drops_submitted_exam(self):
        manager = SessionManager()
        exam = manager.create_exam(topic="Done", questions=QUESTIONS, start=False)
        exam.submit()
        exam.last_activity = datetime.now(timezone.utc) - timedelta(hours=2)
        assert manager.sweep() == 1
        assert manager.exams == {}

    def test_stop_cancels_exam_timers(self):
        async def run():
            manager = SessionManager()
            manager.start(idle_seconds=60, sweep_interval=5)
            exam = manager.create_exam(topic="Timed", questions=QUESTIONS, tick_seconds=3600)
            task = exam._timer_task
            await manager.stop()
            await asyncio.sleep(0.01)
            return task

        task = asyncio.run(run())
        assert task.done()


class TestProfileCache:
    def test_memory_fallback(self):
        async def run():
            cache = ProfileCache("redis://localhost:6379/0", enabled=False)
            key = profile_key(42)
            await cache.set(key, {"displayName": "Ada"})
            got = await cache.get(key)
            deleted = await cache.delete(key)
            return cache.backend, got, deleted, await cache.get(key)

        backend, got, deleted, after = asyncio.run(run())
        assert backend == "memory"
        assert got == {"displayName": "Ada"}
        assert deleted is True
        assert after is None

    def test_key_format(self):
        assert profile_key(7) == "profileData_7"
