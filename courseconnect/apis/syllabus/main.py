from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from courseconnect.apis.common import http_error
from courseconnect.apis.deps import CurrentUser, OptionalUser
from courseconnect.core.config import settings
from courseconnect.core.db.base import get_session
from courseconnect.core.db_services import SyllabusService
from courseconnect.core.logging import get_logger
from courseconnect.modules.documents import (
    ExtractionError,
    FileKind,
    run_extraction,
    validate_upload,
)
from courseconnect.modules.syllabus import build_training_sample, parse_syllabus
from .schemas import SyllabusRead, SyllabusUploadResponse

logger = get_logger(__name__)

router = APIRouter()

BASE = f"{settings.api_root}/syllabus"

ALLOWED = (FileKind.PDF, FileKind.DOCX, FileKind.TEXT, FileKind.IMAGE)


@router.post(f"{BASE}/upload", response_model=SyllabusUploadResponse, tags=["syllabus"])
async def upload_syllabus(
    user: OptionalUser,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
) -> SyllabusUploadResponse:
    data = await file.read()
    file_name = file.filename or "syllabus"
    try:
        kind = validate_upload(file_name, file.content_type, len(data), allowed=ALLOWED)
        extracted = await run_extraction(kind, data)
    except ExtractionError as e:
        logger.warning(f"Syllabus extraction failed for {file_name}: {e}")
        raise http_error(e) from e

    result = await parse_syllabus(extracted.text, file_name)
    parsed = result.data.model_dump(by_alias=True, mode="json") if result.data else {}
    sample = build_training_sample(extracted.text, parsed)

    row_id = None
    if user is not None:
        row = await SyllabusService(session).save(
            user_id=user.id,
            file_name=file_name,
            file_type=kind.value,
            text_length=extracted.length,
            course_code=result.data.course_info.course_code if result.data else None,
            parsed=parsed,
        )
        row_id = row.id

    return SyllabusUploadResponse(
        id=row_id,
        file_name=file_name,
        file_type=kind.value,
        text_length=extracted.length,
        result=result,
        sample=sample,
        saved=row_id is not None,
    )


@router.get(BASE, response_model=list[SyllabusRead], tags=["syllabus"])
async def list_syllabi(
    user: CurrentUser,
    session: AsyncSession = Depends(get_session),
) -> list[SyllabusRead]:
    rows = await SyllabusService(session).list_for_user(user_id=user.id)
    return [SyllabusRead.model_validate(r) for r in rows]
