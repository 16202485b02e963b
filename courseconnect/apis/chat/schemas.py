from __future__ import annotations

from typing import Optional

from pydantic import Field

from courseconnect.apis.common import CamelModel


class ChatTurnIn(CamelModel):
    sender: str = "user"
    message: str = ""


class ChatRequest(CamelModel):
    message: str = Field(default="", max_length=4000)
    context: Optional[str] = None
    conversation_history: list[ChatTurnIn] = Field(default_factory=list)


class ChatResponse(CamelModel):
    success: bool = True
    response: str
    model: str
    # "ai" | "fallback"
    source: str
