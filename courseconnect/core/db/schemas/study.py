from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from courseconnect.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User
    from .flashcards import FlashcardSet


class StudySession(Base):
    """One graded flashcard answer."""

    __tablename__ = "study_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    flashcard_set_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("flashcard_sets.id", ondelete="SET NULL"), nullable=True, index=True
    )
    set_title: Mapped[str] = mapped_column(String, nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    user_answer: Mapped[str] = mapped_column(Text, nullable=False, default="")
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    answer_type: Mapped[str] = mapped_column(String, nullable=False, default="text")
    difficulty: Mapped[str] = mapped_column(String, nullable=False, default="Medium")
    topic: Mapped[str] = mapped_column(String, nullable=False, default="General")
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="study_sessions")
    flashcard_set: Mapped[Optional["FlashcardSet"]] = relationship(
        "FlashcardSet", back_populates="study_sessions"
    )


__all__ = ["StudySession"]
