from courseconnect.modules.quiz.exam import ExamSession, format_time
from courseconnect.modules.quiz.manager import (
    SessionManager,
    SessionNotFound,
    session_manager,
)
from courseconnect.modules.quiz.models import (
    AnswerType,
    ExamResult,
    ExamState,
    QuizKind,
    QuizQuestion,
    QuizState,
    QuizSummary,
    SessionStatus,
)
from courseconnect.modules.quiz.session import (
    InvalidTransition,
    QuizSession,
    SessionError,
)

__all__ = [
    "AnswerType",
    "ExamResult",
    "ExamSession",
    "ExamState",
    "InvalidTransition",
    "QuizKind",
    "QuizQuestion",
    "QuizSession",
    "QuizState",
    "QuizSummary",
    "SessionError",
    "SessionManager",
    "SessionNotFound",
    "SessionStatus",
    "format_time",
    "session_manager",
]
