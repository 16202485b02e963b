"""Signed channel authorisations.

``/pusher/auth`` hands out a short-lived HS256 token bound to one channel
(and, for presence channels, one member). The WebSocket endpoint requires it
for ``private-`` and ``presence-`` channels.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import jwt

from courseconnect.core.config import settings
from courseconnect.modules.realtime.models import Member

ALGORITHM = "HS256"
PRIVATE_PREFIX = "private-"
PRESENCE_PREFIX = "presence-"


class ChannelAuthError(ValueError):
    pass


def is_presence(channel: str) -> bool:
    return channel.startswith(PRESENCE_PREFIX)


def requires_auth(channel: str) -> bool:
    return channel.startswith((PRIVATE_PREFIX, PRESENCE_PREFIX))


def issue_channel_token(
    socket_id: str, channel: str, member: Optional[Member] = None
) -> str:
    now = int(time.time())
    payload: dict[str, Any] = {
        "sid": socket_id,
        "channel": channel,
        "iat": now,
        "exp": now + settings.jwt.channel_token_lifetime_seconds,
    }
    if member is not None and is_presence(channel):
        payload["member"] = member.model_dump()
    return jwt.encode(payload, settings.app.jwt_secret, algorithm=ALGORITHM)


def verify_channel_token(token: str, channel: str) -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.app.jwt_secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError as e:
        raise ChannelAuthError(f"invalid_token: {e}") from e
    if payload.get("channel") != channel:
        raise ChannelAuthError("channel_mismatch")
    return payload
