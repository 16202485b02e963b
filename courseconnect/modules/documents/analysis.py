"""Tutor-style analysis of an uploaded file.

Images are read with OCR and the text is explained by the configured LLM.
Other documents get a templated response asking the student to paste the
relevant sections.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel
from pydantic_ai import Agent

from courseconnect.core.logging import get_logger
from courseconnect.modules.documents.extraction import (
    ExtractionError,
    FileKind,
    detect_kind,
    run_extraction,
)
from courseconnect.modules.llm import build_model

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a patient tutor. A student uploaded an image and the text below "
    "was read from it with OCR, so it may contain recognition errors. Explain "
    "what the image shows, walk through any problems step by step and point "
    "out the key concepts. Use markdown. Use LaTeX ($...$) for math."
)


class FileAnalysis(BaseModel):
    analysis: str
    provider: str
    extracted_text: Optional[str] = None
    confidence: Optional[float] = None


def document_template(file_name: str, file_type: str, specialty: str, description: str) -> str:
    if specialty and specialty != "General":
        specialised = (
            f"As your {specialty} specializing in {description}, I can provide "
            "expert analysis focused on your field of expertise."
        )
    else:
        specialised = "I can provide comprehensive analysis across multiple subjects."
    return (
        f"I can see you've uploaded a document: **{file_name}**\n\n"
        "**Document Analysis:**\n"
        f"• File: {file_name}\n"
        f"• Type: {file_type}\n"
        "• Content: Document content detected\n\n"
        "**What I can help with:**\n"
        "• Extract key information if you share the content\n"
        "• Explain concepts from the document\n"
        "• Answer questions about the topics covered\n"
        "• Provide additional context and examples\n\n"
        "**Specialized Analysis:**\n"
        f"{specialised}\n\n"
        "**Next Steps:**\n"
        "Please share the text content from this document, and I can provide "
        "detailed analysis and explanations. You can copy and paste the relevant "
        "sections you'd like me to analyze.\n\n"
        "What specific aspects of this document would you like me to explain?"
    )


async def explain_text(text: str, *, specialty: str, description: str) -> str:
    agent = Agent(model=build_model(), system_prompt=SYSTEM_PROMPT, retries=1)
    res = await agent.run(
        f"Tutor specialty: {specialty} ({description})\n\nOCR text:\n{text}"
    )
    return str(res.output)


async def analyze_file(
    data: bytes,
    *,
    file_name: str,
    file_type: str,
    specialty: str = "General",
    description: str = "General AI tutor",
) -> FileAnalysis:
    kind = detect_kind(file_name, file_type)
    if kind != FileKind.IMAGE:
        return FileAnalysis(
            analysis=document_template(file_name, file_type, specialty, description),
            provider="text-analysis",
        )

    extracted = await run_extraction(FileKind.IMAGE, data)
    if not extracted.text:
        raise ExtractionError("No text could be read from the image")
    try:
        analysis = await explain_text(
            extracted.text, specialty=specialty, description=description
        )
        provider = "ocr+llm"
    except Exception as e:  # noqa: BLE001
        logger.warning(f"Image explanation failed, returning OCR text: {e}")
        analysis = f"**Text found in {file_name}:**\n\n{extracted.text}"
        provider = "ocr"
    return FileAnalysis(
        analysis=analysis,
        provider=provider,
        extracted_text=extracted.text,
        confidence=extracted.confidence,
    )
