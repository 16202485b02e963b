from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from courseconnect.apis.deps import CurrentUser
from courseconnect.core.config import settings
from courseconnect.core.db.base import get_session
from courseconnect.core.db_services import StudySessionService
from courseconnect.modules.flashcards import check_answer
from courseconnect.modules.flashcards.grading import check_choice
from courseconnect.modules.quiz.models import AnswerType
from .schemas import StudySessionCreate, StudySessionRead, StudyStatsRead

router = APIRouter()

BASE = f"{settings.api_root}/study-sessions"


@router.post(
    BASE,
    response_model=StudySessionRead,
    status_code=status.HTTP_201_CREATED,
    tags=["study"],
)
async def record_answer(
    req: StudySessionCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> StudySessionRead:
    user_answer = req.user_answer
    is_correct = req.is_correct
    if is_correct is None:
        if req.answer_type == AnswerType.MCQ and req.options:
            is_correct, user_answer = check_choice(
                req.user_answer, req.options, req.correct_answer
            )
        else:
            is_correct = check_answer(req.user_answer, req.correct_answer)

    try:
        row = await StudySessionService(session).record(
            user_id=user.id,
            question=req.question,
            user_answer=user_answer,
            correct_answer=req.correct_answer,
            is_correct=is_correct,
            answer_type=req.answer_type.value,
            set_title=req.set_title,
            flashcard_set_id=req.flashcard_set_id,
            topic=req.topic,
            difficulty=req.difficulty,
        )
    except LookupError:
        raise HTTPException(status_code=404, detail="Flashcard set not found")
    return StudySessionRead.model_validate(row)


@router.get(BASE, response_model=list[StudySessionRead], tags=["study"])
async def list_answers(
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
    limit: int = Query(default=50, ge=1, le=500),
    flashcard_set_id: Optional[int] = Query(default=None, alias="flashcardSetId"),
) -> list[StudySessionRead]:
    rows = await StudySessionService(session).list_sessions(
        user_id=user.id, limit=limit, flashcard_set_id=flashcard_set_id
    )
    return [StudySessionRead.model_validate(r) for r in rows]


@router.get(f"{BASE}/stats", response_model=StudyStatsRead, tags=["study"])
async def stats(
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> StudyStatsRead:
    return StudyStatsRead(**await StudySessionService(session).stats(user_id=user.id))
