from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from courseconnect.apis.common import http_error
from courseconnect.apis.deps import OptionalUser
from courseconnect.core.config import settings
from courseconnect.core.db.base import get_session
from courseconnect.core.db_services import StudySessionService
from courseconnect.core.logging import get_logger
from courseconnect.modules.flashcards import generate_options
from courseconnect.modules.quiz import (
    AnswerType,
    QuizKind,
    QuizQuestion,
    QuizSession,
    QuizState,
    QuizSummary,
    SessionError,
    session_manager,
)
from courseconnect.modules.quiz.models import QuizResult
from .schemas import AnswerRequest, AnswerResponse, AnswerTypeRequest, CreateQuizRequest

logger = get_logger(__name__)

router = APIRouter()

BASE = f"{settings.api_root}/quiz/sessions"


def _get(session_id: str) -> QuizSession:
    try:
        return session_manager.get_quiz(session_id)
    except SessionError as e:
        raise http_error(e) from e


async def _save_study_answer(
    db: AsyncSession, user_id: int, quiz: QuizSession, result: QuizResult
) -> None:
    """Store a flashcard answer in the study history; failures only log."""
    try:
        await StudySessionService(db).record(
            user_id=user_id,
            question=result.question,
            user_answer=result.user_answer,
            correct_answer=result.correct_answer,
            is_correct=result.is_correct,
            answer_type=result.answer_type.value,
            flashcard_set_id=quiz.flashcard_set_id,
            topic=quiz.topic,
        )
    except Exception as e:
        await db.rollback()
        logger.warning(f"Could not save study session for quiz {quiz.id}: {e}")


@router.post(
    BASE,
    response_model=QuizState,
    status_code=status.HTTP_201_CREATED,
    tags=["quiz"],
)
async def create_quiz(req: CreateQuizRequest) -> QuizState:
    if req.flashcards:
        questions = [
            QuizQuestion(question=c.question, answer=c.answer) for c in req.flashcards
        ]
        kind = QuizKind.FLASHCARDS
    else:
        questions = list(req.questions or [])
        kind = QuizKind.QUESTIONS
    try:
        quiz = session_manager.create_quiz(
            topic=req.topic,
            questions=questions,
            kind=kind,
            flashcard_set_id=req.flashcard_set_id,
        )
    except SessionError as e:
        raise http_error(e) from e
    if req.start:
        quiz.start()
    return quiz.to_state()


@router.get(f"{BASE}/{{session_id}}", response_model=QuizState, tags=["quiz"])
async def get_quiz(session_id: str) -> QuizState:
    return _get(session_id).to_state()


@router.post(f"{BASE}/{{session_id}}/start", response_model=QuizState, tags=["quiz"])
async def start_quiz(session_id: str) -> QuizState:
    quiz = _get(session_id)
    async with quiz.lock:
        try:
            quiz.start()
        except SessionError as e:
            raise http_error(e) from e
        return quiz.to_state()


@router.post(
    f"{BASE}/{{session_id}}/answer-type", response_model=QuizState, tags=["quiz"]
)
async def set_answer_type(session_id: str, req: AnswerTypeRequest) -> QuizState:
    quiz = _get(session_id)
    async with quiz.lock:
        options = req.options
        idx = quiz.current_index
        if (
            req.answer_type == AnswerType.MCQ
            and not options
            and idx not in quiz.mcq_options
            and quiz.kind == QuizKind.FLASHCARDS
        ):
            card = quiz.questions[idx]
            options, source = await generate_options(card.question, card.answer)
            logger.info("Built %s options for quiz %s question %d", source, quiz.id, idx)
        try:
            quiz.set_answer_type(req.answer_type, options)
        except SessionError as e:
            raise http_error(e) from e
        return quiz.to_state()


@router.post(
    f"{BASE}/{{session_id}}/answer", response_model=AnswerResponse, tags=["quiz"]
)
async def submit_answer(
    session_id: str,
    req: AnswerRequest,
    user: OptionalUser,
    db: AsyncSession = Depends(get_session),
) -> AnswerResponse:
    quiz = _get(session_id)
    async with quiz.lock:
        try:
            result = quiz.submit_answer(req.answer)
        except SessionError as e:
            raise http_error(e) from e
        state = quiz.to_state()
    if user is not None and quiz.kind == QuizKind.FLASHCARDS:
        await _save_study_answer(db, user.id, quiz, result)
    return AnswerResponse(result=result, state=state)


@router.post(f"{BASE}/{{session_id}}/next", response_model=QuizState, tags=["quiz"])
async def next_question(session_id: str) -> QuizState:
    quiz = _get(session_id)
    async with quiz.lock:
        try:
            quiz.next()
        except SessionError as e:
            raise http_error(e) from e
        return quiz.to_state()


@router.post(f"{BASE}/{{session_id}}/finish", response_model=QuizState, tags=["quiz"])
async def finish_quiz(session_id: str) -> QuizState:
    quiz = _get(session_id)
    async with quiz.lock:
        try:
            quiz.finish()
        except SessionError as e:
            raise http_error(e) from e
        return quiz.to_state()


@router.post(
    f"{BASE}/{{session_id}}/restart", response_model=QuizState, tags=["quiz"]
)
async def restart_quiz(session_id: str) -> QuizState:
    quiz = _get(session_id)
    async with quiz.lock:
        quiz.restart()
        return quiz.to_state()


@router.get(
    f"{BASE}/{{session_id}}/summary", response_model=QuizSummary, tags=["quiz"]
)
async def quiz_summary(session_id: str) -> QuizSummary:
    return _get(session_id).summary()


@router.delete(
    f"{BASE}/{{session_id}}", status_code=status.HTTP_204_NO_CONTENT, tags=["quiz"]
)
async def delete_quiz(session_id: str) -> None:
    if session_id not in session_manager.quizzes:
        raise HTTPException(status_code=404, detail="quiz_not_found")
    session_manager.drop_quiz(session_id)
