from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from courseconnect.apis.common import CamelModel
from courseconnect.modules.syllabus import ParsingResult


class SyllabusUploadResponse(CamelModel):
    id: Optional[int] = None
    file_name: str
    file_type: Optional[str] = None
    text_length: int
    result: ParsingResult
    # PII-redacted snippets and fields, safe to show or store
    sample: dict[str, Any]
    saved: bool = False


class SyllabusRead(CamelModel):
    id: int
    file_name: str
    file_type: Optional[str] = None
    text_length: int
    course_code: Optional[str] = None
    parsed: dict[str, Any]
    created_at: datetime
