from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Member(BaseModel):
    """Presence identity attached to a channel subscription."""

    user_id: str
    user_name: str = "Guest User"
    user_photo_url: str = ""

    def info(self) -> dict[str, str]:
        return {"userName": self.user_name, "userPhotoURL": self.user_photo_url}


class ChatMessage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sender: str
    text: str
    timestamp: datetime = Field(default_factory=_now_utc)
    course_data: Optional[dict[str, Any]] = None


class Event(BaseModel):
    event: str
    channel: str
    data: Any = None
