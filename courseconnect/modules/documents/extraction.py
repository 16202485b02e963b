"""Text extraction from uploaded PDF, DOCX and image files.

The extractors are synchronous and CPU bound; ``run_extraction`` moves them
to a worker thread and bounds them with a timeout so a large scan cannot
stall the event loop.
"""

from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import pytesseract
import PyPDF2
from docx import Document as DocxDocument
from PIL import Image

from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger

logger = get_logger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".webp")


class ExtractionError(ValueError):
    """Extraction failed or produced no text."""


class UnsupportedFileType(ExtractionError):
    pass


class FileTooLarge(ExtractionError):
    pass


class ExtractionTimeout(ExtractionError):
    pass


class FileKind(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    IMAGE = "image"
    TEXT = "text"


@dataclass
class ExtractedText:
    text: str
    kind: FileKind
    confidence: Optional[float] = None
    pages: Optional[int] = None

    @property
    def length(self) -> int:
        return len(self.text)


def detect_kind(filename: str, content_type: Optional[str]) -> Optional[FileKind]:
    """Classify by MIME type first, then by extension."""
    ctype = (content_type or "").lower()
    name = (filename or "").lower()
    if ctype == PDF_MIME or name.endswith(".pdf"):
        return FileKind.PDF
    if ctype == DOCX_MIME or name.endswith(".docx"):
        return FileKind.DOCX
    if ctype.startswith("image/") or name.endswith(IMAGE_EXTENSIONS):
        return FileKind.IMAGE
    if ctype.startswith("text/") or name.endswith((".txt", ".md")):
        return FileKind.TEXT
    return None


def validate_upload(
    filename: str,
    content_type: Optional[str],
    size: int,
    *,
    allowed: tuple[FileKind, ...],
    max_bytes: Optional[int] = None,
) -> FileKind:
    limit = max_bytes or settings.documents.max_upload_bytes
    if size > limit:
        raise FileTooLarge(
            f"File too large. Maximum size is {limit // (1024 * 1024)}MB. "
            f"Your file is {size / 1024 / 1024:.1f}MB"
        )
    kind = detect_kind(filename, content_type)
    if kind is None or kind not in allowed:
        expected = ", ".join(k.value for k in allowed)
        raise UnsupportedFileType(
            f"Invalid file type. Expected {expected}. Received: {content_type or 'unknown'}"
        )
    return kind


# Extractors -------------------------------------------------------------
def extract_pdf_text(data: bytes) -> ExtractedText:
    try:
        reader = PyPDF2.PdfReader(io.BytesIO(data))
        if getattr(reader, "is_encrypted", False):
            reader.decrypt("")
        parts = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise ExtractionError(f"Could not read PDF: {e}") from e
    text = "\n".join(parts).strip()
    if not text:
        raise ExtractionError("No text content found in the PDF file")
    return ExtractedText(text=text, kind=FileKind.PDF, pages=len(parts))


def extract_docx_text(data: bytes) -> ExtractedText:
    try:
        doc = DocxDocument(io.BytesIO(data))
    except Exception as e:
        raise ExtractionError(f"DOCX text extraction failed: {e}") from e
    lines = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    text = "\n".join(lines).strip()
    if not text:
        raise ExtractionError("No text content found in the DOCX file")
    return ExtractedText(text=text, kind=FileKind.DOCX)


def _ocr_confidence(img: Image.Image, lang: str) -> Optional[float]:
    data = pytesseract.image_to_data(img, lang=lang, output_type=pytesseract.Output.DICT)
    scores = []
    for raw in data.get("conf", []):
        try:
            value = float(raw)
        except (TypeError, ValueError):
            continue
        if value >= 0:
            scores.append(value)
    if not scores:
        return None
    return round(sum(scores) / len(scores), 2)


def extract_image_text(data: bytes, *, lang: Optional[str] = None) -> ExtractedText:
    lang = lang or settings.documents.ocr_language
    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGB")
            text = pytesseract.image_to_string(img, lang=lang)
            confidence = _ocr_confidence(img, lang)
    except pytesseract.TesseractNotFoundError as e:
        raise ExtractionError("OCR engine is not installed") from e
    except Exception as e:
        raise ExtractionError(f"OCR processing failed: {e}") from e
    return ExtractedText(text=text.strip(), kind=FileKind.IMAGE, confidence=confidence)


def extract_plain_text(data: bytes) -> ExtractedText:
    text = data.decode("utf-8", errors="replace").strip()
    if not text:
        raise ExtractionError("File is empty")
    return ExtractedText(text=text, kind=FileKind.TEXT)


EXTRACTORS: dict[FileKind, Callable[[bytes], ExtractedText]] = {
    FileKind.PDF: extract_pdf_text,
    FileKind.DOCX: extract_docx_text,
    FileKind.IMAGE: extract_image_text,
    FileKind.TEXT: extract_plain_text,
}


async def run_extraction(
    kind: FileKind, data: bytes, *, timeout: Optional[float] = None
) -> ExtractedText:
    if timeout is None:
        timeout = (
            settings.documents.ocr_timeout_seconds
            if kind == FileKind.IMAGE
            else settings.documents.extraction_timeout_seconds
        )
    extractor = EXTRACTORS[kind]
    try:
        result = await asyncio.wait_for(asyncio.to_thread(extractor, data), timeout)
    except asyncio.TimeoutError as e:
        logger.warning("Extraction of %s timed out after %ss", kind.value, timeout)
        raise ExtractionTimeout(f"Extraction timed out after {timeout} seconds") from e
    logger.info(
        "Extracted %d characters from %s%s",
        result.length,
        kind.value,
        f" (confidence {result.confidence}%)" if result.confidence is not None else "",
    )
    return result
