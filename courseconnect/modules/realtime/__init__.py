from .hub import ChannelHub, channel_hub
from .models import ChatMessage, Event, Member
from .tokens import (
    ChannelAuthError,
    is_presence,
    issue_channel_token,
    requires_auth,
    verify_channel_token,
)

__all__ = [
    "ChannelAuthError",
    "ChannelHub",
    "ChatMessage",
    "Event",
    "Member",
    "channel_hub",
    "is_presence",
    "issue_channel_token",
    "requires_auth",
    "verify_channel_token",
]
