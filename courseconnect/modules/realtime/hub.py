"""In-process channel hub replacing the hosted realtime service.

Each channel holds its open sockets. Presence channels also track one member
per socket and announce joins and leaves with ``pusher:member_added`` and
``pusher:member_removed`` so existing clients keep working.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import WebSocket

from courseconnect.core.logging import get_logger
from courseconnect.modules.realtime.models import Member
from courseconnect.modules.realtime.tokens import is_presence

logger = get_logger(__name__)

CLIENT_EVENT_PREFIX = "client-"


class ChannelHub:
    def __init__(self) -> None:
        self._by_channel: dict[str, dict[WebSocket, Optional[Member]]] = {}

    async def subscribe(
        self, channel: str, ws: WebSocket, member: Optional[Member] = None
    ) -> None:
        await ws.accept()
        conns = self._by_channel.setdefault(channel, {})
        conns[ws] = member
        logger.info("Socket subscribed", extra={"channel": channel})

        data: dict[str, Any] = {}
        if is_presence(channel):
            data = {"presence": self.presence(channel)}
        await self._send(ws, channel, "pusher:subscription_succeeded", data)
        if member is not None and is_presence(channel):
            await self.trigger(
                channel,
                "pusher:member_added",
                {"id": member.user_id, "info": member.info()},
                exclude=ws,
            )

    async def unsubscribe(self, channel: str, ws: WebSocket) -> None:
        conns = self._by_channel.get(channel)
        if not conns or ws not in conns:
            return
        member = conns.pop(ws)
        if not conns:
            self._by_channel.pop(channel, None)
        logger.info("Socket unsubscribed", extra={"channel": channel})
        if member is not None and is_presence(channel):
            still_here = any(
                m is not None and m.user_id == member.user_id
                for m in self._by_channel.get(channel, {}).values()
            )
            if not still_here:
                await self.trigger(
                    channel, "pusher:member_removed", {"id": member.user_id}
                )

    async def trigger(
        self,
        channel: str,
        event: str,
        data: Any,
        *,
        exclude: Optional[WebSocket] = None,
    ) -> int:
        """Send an event to every socket on the channel; returns deliveries."""
        delivered = 0
        dead: list[WebSocket] = []
        for ws in list(self._by_channel.get(channel, {}).keys()):
            if ws is exclude:
                continue
            try:
                await self._send(ws, channel, event, data)
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"Dropping socket after failed send of {event}: {e}",
                    extra={"channel": channel},
                )
                dead.append(ws)
        for ws in dead:
            await self.unsubscribe(channel, ws)
        return delivered

    async def relay(self, channel: str, sender: WebSocket, raw: str) -> None:
        """Forward a client event from one socket to the rest of the channel."""
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            await self._send(sender, channel, "pusher:error", {"message": "invalid_json"})
            return
        event = msg.get("event") if isinstance(msg, dict) else None
        if not isinstance(event, str) or not event.startswith(CLIENT_EVENT_PREFIX):
            await self._send(
                sender,
                channel,
                "pusher:error",
                {"message": f"Client events must start with '{CLIENT_EVENT_PREFIX}'"},
            )
            return
        await self.trigger(channel, event, msg.get("data"), exclude=sender)

    def presence(self, channel: str) -> dict[str, Any]:
        members = self.members(channel)
        return {
            "ids": [m.user_id for m in members],
            "hash": {m.user_id: m.info() for m in members},
            "count": len(members),
        }

    def members(self, channel: str) -> list[Member]:
        seen: dict[str, Member] = {}
        for m in self._by_channel.get(channel, {}).values():
            if m is not None:
                seen.setdefault(m.user_id, m)
        return list(seen.values())

    def count(self, channel: str) -> int:
        return len(self._by_channel.get(channel, {}))

    @staticmethod
    async def _send(ws: WebSocket, channel: str, event: str, data: Any) -> None:
        await ws.send_text(
            json.dumps(
                {"event": event, "channel": channel, "data": data},
                ensure_ascii=False,
                default=str,
            )
        )


# Singleton hub used by the API layer
channel_hub = ChannelHub()
