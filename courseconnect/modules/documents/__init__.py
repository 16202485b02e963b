from .analysis import FileAnalysis, analyze_file
from .extraction import (
    ExtractedText,
    ExtractionError,
    ExtractionTimeout,
    FileKind,
    FileTooLarge,
    UnsupportedFileType,
    run_extraction,
    validate_upload,
)

__all__ = [
    "ExtractedText",
    "ExtractionError",
    "ExtractionTimeout",
    "FileAnalysis",
    "FileKind",
    "FileTooLarge",
    "UnsupportedFileType",
    "analyze_file",
    "run_extraction",
    "validate_upload",
]
