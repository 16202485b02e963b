from __future__ import annotations

import secrets
import time
from typing import Optional

from fastapi import (
    APIRouter,
    Header,
    HTTPException,
    Request,
    WebSocket,
    WebSocketDisconnect,
)
from pydantic import ValidationError

from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger
from courseconnect.modules.realtime import (
    ChannelAuthError,
    ChatMessage,
    Member,
    channel_hub,
    is_presence,
    issue_channel_token,
    requires_auth,
    verify_channel_token,
)
from .schemas import (
    ChannelAuthRequest,
    ChannelAuthResponse,
    MemberRead,
    MembersResponse,
    TriggerRequest,
    TriggerResponse,
)

logger = get_logger(__name__)

router = APIRouter()

BASE = f"{settings.api_root}/pusher"

MESSAGE_EVENT = "new-message"


def guest_id() -> str:
    return f"guest_{int(time.time() * 1000)}_{secrets.token_hex(5)}"


async def _read_auth_request(request: Request) -> ChannelAuthRequest:
    """Accept JSON, form-encoded bodies or query parameters."""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        raw = await request.json()
    else:
        form = await request.form()
        raw = {k: form.get(k) for k in ("socket_id", "channel_name")}
        if not raw["socket_id"] or not raw["channel_name"]:
            raw = {
                "socket_id": request.query_params.get("socket_id", ""),
                "channel_name": request.query_params.get("channel_name", ""),
            }
    try:
        return ChannelAuthRequest.model_validate(raw)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="socket_id and channel_name are required") from e


@router.post(f"{BASE}/send-message", response_model=TriggerResponse, tags=["realtime"])
async def send_message(req: TriggerRequest) -> TriggerResponse:
    data = req.data
    if req.event == MESSAGE_EVENT:
        try:
            data = ChatMessage.model_validate(req.data).model_dump(
                by_alias=True, mode="json"
            )
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors()) from e
    delivered = await channel_hub.trigger(req.channel, req.event, data)
    logger.info(
        "Triggered %s to %d sockets", req.event, delivered, extra={"channel": req.channel}
    )
    return TriggerResponse(delivered=delivered)


@router.post(
    f"{BASE}/auth",
    response_model=ChannelAuthResponse,
    response_model_exclude_none=True,
    tags=["realtime"],
)
async def authorize_channel(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    x_user_photo: Optional[str] = Header(default=None),
) -> ChannelAuthResponse:
    req = await _read_auth_request(request)
    member = None
    if is_presence(req.channel_name):
        member = Member(
            user_id=x_user_id or guest_id(),
            user_name=x_user_name or "Guest User",
            user_photo_url=x_user_photo or "",
        )
    token = issue_channel_token(req.socket_id, req.channel_name, member)
    logger.info("Authorized socket %s", req.socket_id, extra={"channel": req.channel_name})
    return ChannelAuthResponse.for_member(
        token,
        {"user_id": member.user_id, "user_info": member.info()} if member else None,
    )


@router.get(
    f"{BASE}/channels/{{channel}}/members",
    response_model=MembersResponse,
    tags=["realtime"],
)
async def channel_members(channel: str) -> MembersResponse:
    members = channel_hub.members(channel)
    return MembersResponse(
        channel=channel,
        count=len(members),
        members=[MemberRead(**m.model_dump()) for m in members],
    )


@router.websocket(f"{BASE}/ws/{{channel}}")
async def channel_socket(websocket: WebSocket, channel: str) -> None:
    member: Optional[Member] = None
    if requires_auth(channel):
        token = websocket.query_params.get("token")
        if not token:
            await websocket.close(code=4401)
            return
        try:
            payload = verify_channel_token(token, channel)
        except ChannelAuthError as e:
            code = 4403 if str(e) == "channel_mismatch" else 4401
            await websocket.close(code=code)
            return
        if payload.get("member"):
            member = Member.model_validate(payload["member"])

    await channel_hub.subscribe(channel, websocket, member)
    try:
        while True:
            raw = await websocket.receive_text()
            await channel_hub.relay(channel, websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await channel_hub.unsubscribe(channel, websocket)
