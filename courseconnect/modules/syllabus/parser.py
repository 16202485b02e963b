"""Syllabus parsing: an LLM pass with a regex fallback.

The fallback only recovers what can be found reliably without a model
(course code, title, instructor, contact emails) and always flags the
result for review.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic_ai import Agent

from courseconnect.core.logging import get_logger
from courseconnect.modules.llm import build_model
from courseconnect.modules.syllabus.models import (
    Contact,
    Contacts,
    CourseInfo,
    ParsedSyllabus,
    ParsingResult,
)

logger = get_logger(__name__)

MAX_PROMPT_CHARS = 20000
TOTAL_SECTIONS = 7
REVIEW_THRESHOLD = 0.7

SYSTEM_PROMPT = (
    "You are an expert at parsing academic syllabi. Extract structured "
    "information and return a JSON object that validates as ParsedSyllabus: "
    "courseInfo (title, instructor, credits, semester, year, courseCode, "
    "department), schedule (day, time, location, type, description), "
    "assignments (name, type, dueDate as YYYY-MM-DD, weight in percent, "
    "description), gradingPolicy (breakdown, scale, policies), readings "
    "(title, author, required, week, chapter, pages, type), policies "
    "(attendance, late, academicIntegrity, technology, other), contacts "
    "(instructor, tas). Use null for missing information and never make "
    "anything up. Set confidence between 0 and 1, being conservative, and list "
    "the sections you actually found in extractedFields."
)

COURSE_CODE_RE = re.compile(r"\b([A-Z]{2,4})\s?-?(\d{3,4}[A-Z]?)\b")
EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
INSTRUCTOR_RE = re.compile(
    r"^\s*(?:instructor|professor|lecturer|taught by)\s*[:\-]\s*(.+)$",
    re.IGNORECASE | re.MULTILINE,
)
SEMESTER_RE = re.compile(r"\b(Fall|Spring|Summer|Winter)\s+(\d{4})\b", re.IGNORECASE)


async def parse_with_ai(text: str, file_name: str) -> ParsedSyllabus:
    agent: Agent[None, ParsedSyllabus] = Agent[None, ParsedSyllabus](
        model=build_model(),
        output_type=ParsedSyllabus,
        system_prompt=SYSTEM_PROMPT,
        retries=2,
    )
    res = await agent.run(
        f"Syllabus file: {file_name}\n\nSYLLABUS TEXT:\n{text[:MAX_PROMPT_CHARS]}"
    )
    return res.output


def parse_with_heuristics(text: str) -> ParsedSyllabus:
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    info = CourseInfo()

    code = COURSE_CODE_RE.search(text)
    if code:
        info.course_code = f"{code.group(1)}{code.group(2)}"
    for line in lines[:10]:
        # First line that is not just the course code
        if len(line) > 3 and (not code or line != code.group(0)):
            info.title = line[:200]
            break
    instructor = INSTRUCTOR_RE.search(text)
    if instructor:
        info.instructor = instructor.group(1).strip()[:120]
    term = SEMESTER_RE.search(text)
    if term:
        info.semester = term.group(1).capitalize()
        info.year = term.group(2)

    emails = list(dict.fromkeys(EMAIL_RE.findall(text)))
    contacts = Contacts()
    if emails:
        contacts.instructor = Contact(name=info.instructor, email=emails[0])
        contacts.tas = [Contact(email=e) for e in emails[1:]]

    found = ["courseInfo"] if info.course_code or info.title else []
    if emails:
        found.append("contacts")
    return ParsedSyllabus(
        course_info=info,
        contacts=contacts,
        confidence=0.3,
        extracted_fields=found,
    )


def score(parsed: ParsedSyllabus, *, source: str) -> ParsingResult:
    errors: list[str] = []
    warnings: list[str] = []
    info = parsed.course_info
    if not (info.title or info.course_code):
        errors.append("Course information not found")
    if not info.title:
        warnings.append("Course title not found")
    if not info.instructor:
        warnings.append("Instructor name not found")

    field_score = len(set(parsed.extracted_fields)) / TOTAL_SECTIONS
    confidence = round(min(parsed.confidence, field_score), 2)
    requires_review = (
        source != "ai"
        or confidence < REVIEW_THRESHOLD
        or len(warnings) > 2
        or bool(errors)
    )
    return ParsingResult(
        success=not errors,
        data=parsed,
        errors=errors,
        warnings=warnings,
        confidence=confidence,
        requires_review=requires_review,
        source=source,
    )


async def parse_syllabus(
    text: str, file_name: str, *, use_ai: bool = True
) -> ParsingResult:
    parsed: Optional[ParsedSyllabus] = None
    source = "heuristic"
    if use_ai:
        try:
            parsed = await parse_with_ai(text, file_name)
            source = "ai"
        except Exception as e:  # noqa: BLE001
            logger.warning(f"AI syllabus parsing failed, using heuristics: {e}")
    if parsed is None:
        parsed = parse_with_heuristics(text)
    result = score(parsed, source=source)
    logger.info(
        "Parsed syllabus %s via %s (confidence %.2f, review=%s)",
        file_name,
        source,
        result.confidence,
        result.requires_review,
    )
    return result
