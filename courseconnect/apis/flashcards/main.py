from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from courseconnect.apis.deps import CurrentUser
from courseconnect.core.config import settings
from courseconnect.core.db.base import get_session
from courseconnect.core.db.schemas.flashcards import FlashcardSet as DBSet
from courseconnect.core.db_services import FlashcardSetService
from courseconnect.core.logging import get_logger
from courseconnect.modules.flashcards import (
    Flashcard,
    GenerateFlashcardsInput,
    check_answer,
    generate_flashcards,
    generate_options,
)
from courseconnect.modules.flashcards.grading import check_choice
from courseconnect.modules.quiz.models import AnswerType
from .schemas import (
    CheckAnswerRequest,
    CheckAnswerResponse,
    FlashcardItem,
    FlashcardRead,
    FlashcardSetRead,
    FlashcardSetSummary,
    GenerateFlashcardsRequest,
    GenerateFlashcardsResponse,
    GenerateOptionsRequest,
    GenerateOptionsResponse,
    SaveFlashcardSetRequest,
    StudyStats,
)

logger = get_logger(__name__)

router = APIRouter()

BASE = f"{settings.api_root}/flashcards"


def _summary(s: DBSet) -> FlashcardSetSummary:
    return FlashcardSetSummary(
        id=s.id,
        title=s.title,
        topic=s.topic,
        card_count=len(s.flashcards),
        created_at=s.created_at,
        study_stats=StudyStats(
            total_studies=s.total_studies,
            correct_answers=s.correct_answers,
            last_studied=s.last_studied,
        ),
    )


def _read(s: DBSet) -> FlashcardSetRead:
    return FlashcardSetRead(
        **_summary(s).model_dump(),
        flashcards=[
            FlashcardRead(
                id=c.id, question=c.question, answer=c.answer, order_index=c.order_index
            )
            for c in s.flashcards
        ],
    )


@router.post(
    f"{BASE}/generate",
    response_model=GenerateFlashcardsResponse,
    tags=["flashcards"],
)
async def generate(req: GenerateFlashcardsRequest) -> GenerateFlashcardsResponse:
    data = GenerateFlashcardsInput(**req.model_dump())
    if data.is_empty():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide a topic, or a class name with chat history",
        )
    try:
        cards = await generate_flashcards(data)
    except Exception as e:
        logger.error(f"Flashcard generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate flashcards",
        ) from e
    return GenerateFlashcardsResponse(
        flashcards=[FlashcardItem(question=c.question, answer=c.answer) for c in cards]
    )


@router.post(
    f"{BASE}/generate-options",
    response_model=GenerateOptionsResponse,
    tags=["flashcards"],
)
async def options(req: GenerateOptionsRequest) -> GenerateOptionsResponse:
    opts, source = await generate_options(
        req.question, req.correct_answer, use_ai=req.use_ai
    )
    return GenerateOptionsResponse(options=opts, source=source)


@router.post(
    f"{BASE}/check-answer",
    response_model=CheckAnswerResponse,
    tags=["flashcards"],
)
async def grade(req: CheckAnswerRequest) -> CheckAnswerResponse:
    user_answer = req.user_answer
    if req.answer_type == AnswerType.MCQ and req.options:
        is_correct, user_answer = check_choice(
            req.user_answer, req.options, req.correct_answer
        )
    else:
        is_correct = check_answer(req.user_answer, req.correct_answer)
    return CheckAnswerResponse(
        is_correct=is_correct,
        user_answer=user_answer,
        correct_answer=req.correct_answer,
    )


@router.post(
    f"{BASE}/sets",
    response_model=FlashcardSetRead,
    status_code=status.HTTP_201_CREATED,
    tags=["flashcards"],
)
async def save_set(
    req: SaveFlashcardSetRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> FlashcardSetRead:
    db = FlashcardSetService(session)
    saved = await db.save_set(
        user_id=user.id,
        title=req.title.strip(),
        topic=req.topic,
        flashcards=[Flashcard(question=c.question, answer=c.answer) for c in req.flashcards],
    )
    logger.info("Saved flashcard set %s (%d cards)", saved.id, len(saved.flashcards))
    return _read(saved)


@router.get(
    f"{BASE}/sets",
    response_model=list[FlashcardSetSummary],
    tags=["flashcards"],
)
async def list_sets(
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> list[FlashcardSetSummary]:
    rows = await FlashcardSetService(session).list_sets(user_id=user.id)
    return [_summary(s) for s in rows]


@router.get(
    f"{BASE}/sets/{{set_id}}",
    response_model=FlashcardSetRead,
    tags=["flashcards"],
)
async def get_set(
    set_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> FlashcardSetRead:
    s = await FlashcardSetService(session).get_set(user_id=user.id, set_id=set_id)
    if not s:
        raise HTTPException(status_code=404, detail="Flashcard set not found")
    return _read(s)


@router.delete(
    f"{BASE}/sets/{{set_id}}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["flashcards"],
)
async def delete_set(
    set_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> None:
    deleted = await FlashcardSetService(session).delete_set(user_id=user.id, set_id=set_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Flashcard set not found")
