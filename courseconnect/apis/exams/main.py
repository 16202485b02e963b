from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from courseconnect.apis.common import http_error
from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger
from courseconnect.modules.quiz import (
    ExamResult,
    ExamSession,
    ExamState,
    SessionError,
    session_manager,
)
from .schemas import CreateExamRequest, ExamAnswerRequest, NavigateRequest

logger = get_logger(__name__)

router = APIRouter()

BASE = f"{settings.api_root}/exams"


def _get(exam_id: str) -> ExamSession:
    try:
        return session_manager.get_exam(exam_id)
    except SessionError as e:
        raise http_error(e) from e


def _log_completion(exam_id: str):
    def _done(result: ExamResult) -> None:
        logger.info(
            "Exam %s finished: %d/%d (%d%%)%s",
            exam_id,
            result.score,
            result.total,
            result.percentage,
            " after timeout" if result.timed_out else "",
        )

    return _done


@router.post(
    BASE,
    response_model=ExamState,
    status_code=status.HTTP_201_CREATED,
    tags=["exams"],
)
async def create_exam(req: CreateExamRequest) -> ExamState:
    try:
        exam = session_manager.create_exam(
            topic=req.topic,
            questions=req.questions,
            time_limit_minutes=req.time_limit_minutes,
        )
    except SessionError as e:
        raise http_error(e) from e
    exam.on_complete = _log_completion(exam.id)
    return exam.to_state()


@router.get(f"{BASE}/{{exam_id}}", response_model=ExamState, tags=["exams"])
async def get_exam(exam_id: str) -> ExamState:
    return _get(exam_id).to_state()


@router.put(
    f"{BASE}/{{exam_id}}/answers/{{index}}", response_model=ExamState, tags=["exams"]
)
async def set_answer(exam_id: str, index: int, req: ExamAnswerRequest) -> ExamState:
    exam = _get(exam_id)
    async with exam.lock:
        try:
            exam.set_answer(index, req.answer)
        except SessionError as e:
            raise http_error(e) from e
        return exam.to_state()


@router.post(f"{BASE}/{{exam_id}}/navigate", response_model=ExamState, tags=["exams"])
async def navigate(exam_id: str, req: NavigateRequest) -> ExamState:
    exam = _get(exam_id)
    async with exam.lock:
        try:
            if req.direction == "next":
                exam.next()
            elif req.direction == "previous":
                exam.previous()
            else:
                exam.goto(req.index)
        except SessionError as e:
            raise http_error(e) from e
        return exam.to_state()


@router.post(f"{BASE}/{{exam_id}}/submit", response_model=ExamResult, tags=["exams"])
async def submit_exam(exam_id: str) -> ExamResult:
    exam = _get(exam_id)
    async with exam.lock:
        return exam.submit()


@router.post(f"{BASE}/{{exam_id}}/retake", response_model=ExamState, tags=["exams"])
async def retake_exam(exam_id: str) -> ExamState:
    exam = _get(exam_id)
    async with exam.lock:
        exam.retake()
        return exam.to_state()


@router.delete(
    f"{BASE}/{{exam_id}}", status_code=status.HTTP_204_NO_CONTENT, tags=["exams"]
)
async def delete_exam(exam_id: str) -> None:
    if exam_id not in session_manager.exams:
        raise HTTPException(status_code=404, detail="exam_not_found")
    session_manager.drop_exam(exam_id)
