from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, Field

from courseconnect.apis.common import CamelModel


class TriggerRequest(BaseModel):
    channel: str = Field(..., min_length=1, max_length=200)
    event: str = Field(..., min_length=1, max_length=100)
    data: Any = None


class TriggerResponse(CamelModel):
    success: bool = True
    delivered: int


class ChannelAuthRequest(BaseModel):
    socket_id: str = Field(..., min_length=1)
    channel_name: str = Field(..., min_length=1)


class ChannelAuthResponse(BaseModel):
    auth: str
    channel_data: Optional[str] = None

    @classmethod
    def for_member(cls, token: str, member: Optional[dict[str, Any]]) -> "ChannelAuthResponse":
        return cls(
            auth=token,
            channel_data=json.dumps(member) if member is not None else None,
        )


class MemberRead(CamelModel):
    user_id: str
    user_name: str
    user_photo_url: str


class MembersResponse(CamelModel):
    channel: str
    count: int
    members: list[MemberRead]
