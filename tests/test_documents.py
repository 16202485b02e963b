import asyncio
import base64
import io
import time

import pytest
from docx import Document

from courseconnect.core.config import settings
from courseconnect.modules.documents import extraction
from courseconnect.modules.documents.extraction import (
    ExtractedText,
    ExtractionTimeout,
    FileKind,
    FileTooLarge,
    UnsupportedFileType,
    detect_kind,
    run_extraction,
    validate_upload,
)

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _docx() -> bytes:
    doc = Document()
    doc.add_paragraph("Cell biology notes")
    doc.add_paragraph("")
    table = doc.add_table(rows=1, cols=2)
    table.cell(0, 0).text = "Osmosis"
    table.cell(0, 1).text = "Diffusion of water"
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


class TestValidation:
    def test_detect_kind(self):
        assert detect_kind("a.pdf", None) == FileKind.PDF
        assert detect_kind("upload", DOCX_MIME) == FileKind.DOCX
        assert detect_kind("scan.JPG", None) == FileKind.IMAGE
        assert detect_kind("readme.md", None) == FileKind.TEXT
        assert detect_kind("archive.zip", "application/zip") is None

    def test_wrong_type(self):
        with pytest.raises(UnsupportedFileType):
            validate_upload("a.pdf", "application/pdf", 10, allowed=(FileKind.DOCX,))

    def test_too_large(self):
        with pytest.raises(FileTooLarge):
            validate_upload("a.pdf", "application/pdf", 2048, allowed=(FileKind.PDF,), max_bytes=1024)

    def test_timeout(self, monkeypatch):
        def slow(data):
            time.sleep(0.3)
            return ExtractedText(text="late", kind=FileKind.TEXT)

        monkeypatch.setitem(extraction.EXTRACTORS, FileKind.TEXT, slow)
        with pytest.raises(ExtractionTimeout):
            asyncio.run(run_extraction(FileKind.TEXT, b"x", timeout=0.05))


class TestExtractionApi:
    def test_docx_paragraphs_and_tables(self, client):
        data = _docx()
        resp = client.post(
            "/api/docx-extract", files={"file": ("notes.docx", data, DOCX_MIME)}
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["success"] is True
        assert body["text"] == "Cell biology notes\nOsmosis | Diffusion of water"
        assert body["metadata"]["fileName"] == "notes.docx"
        assert body["metadata"]["fileSize"] == len(data)
        assert body["metadata"]["textLength"] == len(body["text"])

    def test_docx_endpoint_rejects_pdf(self, client):
        resp = client.post(
            "/api/docx-extract",
            files={"file": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert resp.status_code == 400

    def test_unreadable_pdf(self, client):
        resp = client.post(
            "/api/test-pdf-upload",
            files={"file": ("broken.pdf", b"not a pdf at all", "application/pdf")},
        )
        assert resp.status_code == 400

    def test_oversize_upload(self, client, monkeypatch):
        monkeypatch.setattr(settings.documents, "max_upload_bytes", 16)
        resp = client.post(
            "/api/docx-extract", files={"file": ("notes.docx", _docx(), DOCX_MIME)}
        )
        assert resp.status_code == 413

    def test_ocr(self, client, monkeypatch):
        def fake_ocr(data):
            return ExtractedText(text="E = mc^2", kind=FileKind.IMAGE, confidence=91.5)

        monkeypatch.setitem(extraction.EXTRACTORS, FileKind.IMAGE, fake_ocr)
        resp = client.post(
            "/api/ocr/extract-text",
            files={"file": ("board.png", b"\x89PNG fake", "image/png")},
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "text": "E = mc^2",
            "confidence": 91.5,
            "fileName": "board.png",
        }


class TestAnalyzeFile:
    def test_document_gets_template(self, client):
        payload = base64.b64encode(b"%PDF-1.4 whatever").decode()
        resp = client.post(
            "/api/ai/analyze-file",
            json={
                "fileData": f"data:application/pdf;base64,{payload}",
                "fileName": "lecture.pdf",
                "fileType": "application/pdf",
                "tutorSpecialty": "Physics Tutor",
                "tutorDescription": "mechanics",
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["provider"] == "text-analysis"
        assert "**lecture.pdf**" in body["analysis"]
        assert "As your Physics Tutor specializing in mechanics" in body["analysis"]

    def test_image_without_llm_returns_ocr_text(self, client, monkeypatch):
        from courseconnect.modules.documents import analysis

        async def fake_extract(kind, data, *, timeout=None):
            return ExtractedText(text="x + 2 = 5", kind=FileKind.IMAGE, confidence=88.0)

        async def no_llm(text, *, specialty, description):
            raise RuntimeError("model not configured")

        monkeypatch.setattr(analysis, "run_extraction", fake_extract)
        monkeypatch.setattr(analysis, "explain_text", no_llm)
        resp = client.post(
            "/api/ai/analyze-file",
            json={
                "fileData": base64.b64encode(b"img").decode(),
                "fileName": "homework.png",
                "fileType": "image/png",
            },
        )
        body = resp.json()
        assert body["provider"] == "ocr"
        assert body["extractedText"] == "x + 2 = 5"
        assert "x + 2 = 5" in body["analysis"]

    def test_too_large(self, client, monkeypatch):
        monkeypatch.setattr(settings.documents, "max_upload_bytes", 4)
        resp = client.post(
            "/api/ai/analyze-file",
            json={
                "fileData": base64.b64encode(b"0123456789").decode(),
                "fileName": "big.pdf",
            },
        )
        assert resp.status_code == 413
