import logging
import os
from typing import Optional


DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = os.getenv(
    "LOG_FORMAT", "%(asctime)s | %(levelname)s | %(name)s | %(message)s%(context)s"
)

# ``extra`` keys rendered into %(context)s when present
CONTEXT_FIELDS = ("user_id", "channel", "session_id")
NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "multipart")


class ContextFilter(logging.Filter):
    """Renders known context fields and fills in defaults so formatters never KeyError."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        parts = []
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is None or value == "-":
                setattr(record, name, "-")
            else:
                parts.append(f"{name}={value}")
        record.context = f" [{' '.join(parts)}]" if parts else ""
        return True


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Initialize root logger with a formatter and the context filter."""
    resolved_level = getattr(logging, (level or DEFAULT_LEVEL), logging.INFO)
    formatter = logging.Formatter(fmt or DEFAULT_FORMAT)

    root = logging.getLogger()
    root.setLevel(resolved_level)

    # Clear existing handlers to avoid duplicate logs in reloads
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensure root is initialized."""
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
