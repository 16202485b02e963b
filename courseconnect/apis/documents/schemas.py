from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from courseconnect.apis.common import CamelModel


class AnalyzeFileRequest(CamelModel):
    # Base64 payload, with or without a data: URL prefix
    file_data: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)
    file_type: str = ""
    tutor_specialty: str = "General"
    tutor_description: str = "General AI tutor"


class AnalyzeFileResponse(CamelModel):
    analysis: str
    file_name: str
    file_type: str
    tutor_specialty: str
    provider: str
    extracted_text: Optional[str] = None
    confidence: Optional[float] = None


class ExtractionMetadata(CamelModel):
    file_name: str
    file_size: int
    file_type: Optional[str] = None
    extracted_at: datetime
    text_length: int
    pages: Optional[int] = None


class ExtractionResponse(CamelModel):
    success: bool = True
    text: str
    metadata: ExtractionMetadata


class OcrResponse(CamelModel):
    success: bool = True
    text: str
    confidence: Optional[float] = None
    file_name: str
