"""Database service classes for flashcard sets, study history, profiles and syllabi."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import case, func, select
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from courseconnect.core.db.schemas.flashcards import Flashcard, FlashcardSet
from courseconnect.core.db.schemas.study import StudySession
from courseconnect.core.db.schemas.syllabus import UploadedSyllabus
from courseconnect.core.db.schemas.user_profile import UserProfile
from courseconnect.modules.flashcards.models.flashcards import (
    Flashcard as PydanticFlashcard,
)

DEFAULT_NOTIFICATION_SETTINGS: dict[str, bool] = {
    "chat": True,
    "assignments": True,
    "groups": False,
}

OFFLINE_MARKERS = ("unavailable", "connection")


def _now_naive_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def is_offline_error(exc: BaseException) -> bool:
    """Best-effort guess whether ``exc`` means the database is unreachable."""
    if isinstance(exc, (OperationalError, InterfaceError, ConnectionError)):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in OFFLINE_MARKERS)


class FlashcardSetService:
    """Saved flashcard sets and their study stats."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save_set(
        self,
        *,
        user_id: int,
        title: str,
        topic: str,
        flashcards: list[PydanticFlashcard],
    ) -> FlashcardSet:
        db_set = FlashcardSet(user_id=user_id, title=title, topic=topic or "General")
        self.session.add(db_set)
        await self.session.flush()

        for index, card in enumerate(flashcards):
            self.session.add(
                Flashcard(
                    flashcard_set_id=db_set.id,
                    question=card.question,
                    answer=card.answer,
                    order_index=index,
                )
            )

        await self.session.commit()
        return await self.get_set(user_id=user_id, set_id=db_set.id)

    async def list_sets(self, *, user_id: int) -> list[FlashcardSet]:
        result = await self.session.execute(
            select(FlashcardSet)
            .options(selectinload(FlashcardSet.flashcards))
            .where(FlashcardSet.user_id == user_id)
            .order_by(FlashcardSet.created_at.desc(), FlashcardSet.id.desc())
        )
        return list(result.scalars().all())

    async def get_set(self, *, user_id: int, set_id: int) -> Optional[FlashcardSet]:
        result = await self.session.execute(
            select(FlashcardSet)
            .options(selectinload(FlashcardSet.flashcards))
            .where(FlashcardSet.id == set_id, FlashcardSet.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def delete_set(self, *, user_id: int, set_id: int) -> bool:
        db_set = await self.get_set(user_id=user_id, set_id=set_id)
        if db_set is None:
            return False
        await self.session.delete(db_set)
        await self.session.commit()
        return True


class StudySessionService:
    """Per-answer study history."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        *,
        user_id: int,
        question: str,
        user_answer: str,
        correct_answer: str,
        is_correct: bool,
        answer_type: str = "text",
        set_title: str = "Generated Flashcards",
        flashcard_set_id: Optional[int] = None,
        topic: str = "General",
        difficulty: str = "Medium",
    ) -> StudySession:
        """Store one graded answer and bump the owning set's study stats."""
        db_set: Optional[FlashcardSet] = None
        if flashcard_set_id is not None:
            result = await self.session.execute(
                select(FlashcardSet).where(
                    FlashcardSet.id == flashcard_set_id,
                    FlashcardSet.user_id == user_id,
                )
            )
            db_set = result.scalar_one_or_none()
            if db_set is None:
                raise LookupError("flashcard_set_not_found")

        row = StudySession(
            user_id=user_id,
            flashcard_set_id=flashcard_set_id,
            set_title=db_set.title if db_set else set_title,
            question=question,
            user_answer=user_answer,
            correct_answer=correct_answer,
            is_correct=is_correct,
            answer_type=answer_type,
            difficulty=difficulty,
            topic=db_set.topic if db_set else topic,
        )
        self.session.add(row)

        if db_set is not None:
            db_set.total_studies = (db_set.total_studies or 0) + 1
            if is_correct:
                db_set.correct_answers = (db_set.correct_answers or 0) + 1
            db_set.last_studied = _now_naive_utc()

        await self.session.commit()
        await self.session.refresh(row)
        return row

    async def list_sessions(
        self, *, user_id: int, limit: int = 50, flashcard_set_id: Optional[int] = None
    ) -> list[StudySession]:
        query = select(StudySession).where(StudySession.user_id == user_id)
        if flashcard_set_id is not None:
            query = query.where(StudySession.flashcard_set_id == flashcard_set_id)
        result = await self.session.execute(
            query.order_by(StudySession.created_at.desc(), StudySession.id.desc()).limit(
                limit
            )
        )
        return list(result.scalars().all())

    async def stats(self, *, user_id: int) -> dict[str, Any]:
        result = await self.session.execute(
            select(
                func.count(StudySession.id),
                func.coalesce(
                    func.sum(case((StudySession.is_correct, 1), else_=0)), 0
                ),
                func.max(StudySession.created_at),
            ).where(StudySession.user_id == user_id)
        )
        total, correct, last = result.one()
        sets_result = await self.session.execute(
            select(func.count(FlashcardSet.id)).where(FlashcardSet.user_id == user_id)
        )
        total = int(total or 0)
        correct = int(correct or 0)
        return {
            "total_answers": total,
            "correct_answers": correct,
            "accuracy": round(correct / total * 100) if total else 0,
            "saved_sets": int(sets_result.scalar_one() or 0),
            "last_studied": last,
        }


class UserProfileService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_or_create_profile(self, user_id: int) -> UserProfile:
        """Get existing profile or create a new one with default values"""
        result = await self.session.execute(
            select(UserProfile).where(UserProfile.user_id == user_id)
        )
        profile = result.scalar_one_or_none()

        if not profile:
            profile = UserProfile(
                user_id=user_id,
                notification_settings=dict(DEFAULT_NOTIFICATION_SETTINGS),
            )
            self.session.add(profile)
            await self.session.commit()
            await self.session.refresh(profile)

        return profile

    async def update_profile(self, user_id: int, data: dict[str, Any]) -> UserProfile:
        profile = await self.get_or_create_profile(user_id)
        for field, value in data.items():
            setattr(profile, field, value)
        await self.session.commit()
        await self.session.refresh(profile)
        return profile

    async def update_notifications(
        self, user_id: int, changes: dict[str, bool]
    ) -> UserProfile:
        profile = await self.get_or_create_profile(user_id)
        merged = {**DEFAULT_NOTIFICATION_SETTINGS, **(profile.notification_settings or {})}
        merged.update(changes)
        # New dict so the JSON column registers the change
        profile.notification_settings = merged
        await self.session.commit()
        await self.session.refresh(profile)
        return profile


class SyllabusService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(
        self,
        *,
        user_id: int,
        file_name: str,
        file_type: Optional[str],
        text_length: int,
        course_code: Optional[str],
        parsed: dict[str, Any],
    ) -> UploadedSyllabus:
        row = UploadedSyllabus(
            user_id=user_id,
            file_name=file_name,
            file_type=file_type,
            text_length=text_length,
            course_code=course_code,
            parsed=parsed,
        )
        self.session.add(row)
        await self.session.commit()
        await self.session.refresh(row)
        return row

    async def list_for_user(self, *, user_id: int) -> list[UploadedSyllabus]:
        result = await self.session.execute(
            select(UploadedSyllabus)
            .where(UploadedSyllabus.user_id == user_id)
            .order_by(UploadedSyllabus.created_at.desc(), UploadedSyllabus.id.desc())
        )
        return list(result.scalars().all())
