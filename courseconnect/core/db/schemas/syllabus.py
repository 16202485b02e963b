from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional
from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from courseconnect.core.db.base import Base

if TYPE_CHECKING:
    from .auth import User


class UploadedSyllabus(Base):
    __tablename__ = "uploaded_syllabi"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True
    )
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    text_length: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    course_code: Mapped[Optional[str]] = mapped_column(String, nullable=True, index=True)
    parsed: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="syllabi")


__all__ = ["UploadedSyllabus"]
