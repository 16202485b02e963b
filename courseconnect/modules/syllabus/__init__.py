from .models import ParsedSyllabus, ParsingResult
from .parser import parse_syllabus
from .redaction import build_training_sample, extract_source_snippets, redact_pii

__all__ = [
    "ParsedSyllabus",
    "ParsingResult",
    "build_training_sample",
    "extract_source_snippets",
    "parse_syllabus",
    "redact_pii",
]
