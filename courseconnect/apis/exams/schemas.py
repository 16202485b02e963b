from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, model_validator

from courseconnect.apis.common import CamelModel
from courseconnect.core.config import settings
from courseconnect.modules.quiz.models import QuizQuestion


class CreateExamRequest(CamelModel):
    topic: str = "General"
    questions: list[QuizQuestion] = Field(..., min_length=1)
    time_limit_minutes: int = Field(
        default_factory=lambda: settings.sessions.exam_time_limit_minutes,
        ge=1,
        le=600,
    )


class ExamAnswerRequest(CamelModel):
    answer: str


class NavigateRequest(CamelModel):
    index: Optional[int] = Field(default=None, ge=0)
    direction: Optional[Literal["next", "previous"]] = None

    @model_validator(mode="after")
    def _one_target(self):
        if (self.index is None) == (self.direction is None):
            raise ValueError("Provide either index or direction")
        return self
