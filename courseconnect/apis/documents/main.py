from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from courseconnect.apis.common import http_error
from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger
from courseconnect.modules.documents import (
    ExtractionError,
    FileKind,
    analyze_file,
    run_extraction,
    validate_upload,
)
from .schemas import (
    AnalyzeFileRequest,
    AnalyzeFileResponse,
    ExtractionMetadata,
    ExtractionResponse,
    OcrResponse,
)

logger = get_logger(__name__)

router = APIRouter()

BASE = settings.api_root


def decode_base64_payload(payload: str) -> bytes:
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(status_code=400, detail="fileData is not valid base64") from e


async def _extract_upload(file: UploadFile, allowed: tuple[FileKind, ...]) -> ExtractionResponse:
    data = await file.read()
    try:
        kind = validate_upload(
            file.filename or "", file.content_type, len(data), allowed=allowed
        )
        result = await run_extraction(kind, data)
    except ExtractionError as e:
        logger.warning(f"Extraction failed for {file.filename}: {e}")
        raise http_error(e) from e
    return ExtractionResponse(
        text=result.text,
        metadata=ExtractionMetadata(
            file_name=file.filename or "upload",
            file_size=len(data),
            file_type=file.content_type,
            extracted_at=datetime.now(timezone.utc),
            text_length=result.length,
            pages=result.pages,
        ),
    )


@router.post(
    f"{BASE}/ai/analyze-file",
    response_model=AnalyzeFileResponse,
    tags=["documents"],
)
async def analyze(req: AnalyzeFileRequest) -> AnalyzeFileResponse:
    data = decode_base64_payload(req.file_data)
    if len(data) > settings.documents.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large. Maximum size is 10MB.",
        )
    try:
        result = await analyze_file(
            data,
            file_name=req.file_name,
            file_type=req.file_type,
            specialty=req.tutor_specialty,
            description=req.tutor_description,
        )
    except ExtractionError as e:
        raise http_error(e) from e
    return AnalyzeFileResponse(
        analysis=result.analysis,
        file_name=req.file_name,
        file_type=req.file_type,
        tutor_specialty=req.tutor_specialty,
        provider=result.provider,
        extracted_text=result.extracted_text,
        confidence=result.confidence,
    )


@router.post(
    f"{BASE}/docx-extract", response_model=ExtractionResponse, tags=["documents"]
)
async def docx_extract(file: UploadFile = File(...)) -> ExtractionResponse:
    return await _extract_upload(file, (FileKind.DOCX,))


@router.post(
    f"{BASE}/test-pdf-upload", response_model=ExtractionResponse, tags=["documents"]
)
async def pdf_extract(file: UploadFile = File(...)) -> ExtractionResponse:
    return await _extract_upload(file, (FileKind.PDF,))


@router.post(f"{BASE}/ocr/extract-text", response_model=OcrResponse, tags=["documents"])
async def ocr_extract(file: UploadFile = File(...)) -> OcrResponse:
    data = await file.read()
    try:
        kind = validate_upload(
            file.filename or "", file.content_type, len(data), allowed=(FileKind.IMAGE,)
        )
        result = await run_extraction(kind, data)
    except ExtractionError as e:
        logger.warning(f"OCR failed for {file.filename}: {e}")
        raise http_error(e) from e
    return OcrResponse(
        text=result.text,
        confidence=result.confidence,
        file_name=file.filename or "image",
    )
