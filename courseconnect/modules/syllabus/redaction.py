"""PII redaction and compact source snippets for stored syllabus samples."""

from __future__ import annotations

import re
import time
from typing import Any, Optional

EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
URL_RE = re.compile(
    r"https?://[\w.-]+(?:/[\w\-._~:/?#\[\]@!$&'()*+,;=%]*)?", re.IGNORECASE
)
PHONE_RE = re.compile(r"(?:\+?\d{1,2}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}")
ADDRESS_RE = re.compile(
    r"\b\d{1,5}\s+(?:[A-Za-z0-9.\-]+\s+){0,4}"
    r"(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Lane|Ln|Drive|Dr|Way|Court|Ct|Place|Pl)\b\.?",
    re.IGNORECASE,
)
STUDENT_ID_RE = re.compile(r"\b(?:student\s*id|sid|id)[:#\s]*[A-Za-z0-9\-]{4,}\b", re.IGNORECASE)

SNIPPET_KEYWORDS = (
    "assignment",
    "exam",
    "grade",
    "policy",
    "office",
    "hours",
    "reading",
    "week",
    "schedule",
)
MAX_KEYWORD_HITS = 15
PREVIEW_LINES = 10
SNIPPET_WIDTH = 300


def redact_pii(text: Optional[str]) -> Optional[str]:
    if not text:
        return text
    # URLs before phones so digits inside links are not half-redacted
    out = URL_RE.sub("[REDACTED_URL]", text)
    out = EMAIL_RE.sub("[REDACTED_EMAIL]", out)
    out = PHONE_RE.sub("[REDACTED_PHONE]", out)
    out = ADDRESS_RE.sub("[REDACTED_ADDRESS]", out)
    out = STUDENT_ID_RE.sub("[REDACTED_ID]", out)
    return out


def extract_source_snippets(text: Optional[str]) -> dict[str, list[str]]:
    lines = re.split(r"\r?\n", text or "")
    hits: list[str] = []
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        lowered = stripped.lower()
        if any(k in lowered for k in SNIPPET_KEYWORDS):
            hits.append(stripped[:SNIPPET_WIDTH])
            if len(hits) >= MAX_KEYWORD_HITS:
                break
    return {
        "preview": [s[:SNIPPET_WIDTH] for s in lines[:PREVIEW_LINES]],
        "keywordSamples": hits,
    }


def build_training_sample(raw_text: str, parsed: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Parsed fields plus source snippets, with PII redacted throughout."""
    parsed = parsed or {}
    sample = {
        "version": 1,
        "createdAt": int(time.time() * 1000),
        "fields": {
            "courseInfo": parsed.get("courseInfo"),
            "schedule": parsed.get("schedule") or [],
            "assignments": parsed.get("assignments") or [],
            "gradingPolicy": parsed.get("gradingPolicy") or {},
            "readings": parsed.get("readings") or [],
            "policies": parsed.get("policies") or {},
            "contacts": parsed.get("contacts") or {},
        },
        "snippets": extract_source_snippets(raw_text),
    }
    return _redact_values(sample)


def _redact_values(value: Any) -> Any:
    # Redact string leaves so the result stays valid JSON
    if isinstance(value, str):
        return redact_pii(value)
    if isinstance(value, dict):
        return {k: _redact_values(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact_values(v) for v in value]
    return value
