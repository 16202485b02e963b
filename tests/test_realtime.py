import asyncio
import json
import logging

import pytest
from starlette.websockets import WebSocketDisconnect

from courseconnect.modules.realtime import (
    ChannelAuthError,
    ChannelHub,
    Member,
    issue_channel_token,
    verify_channel_token,
)


def _auth(client, channel, user_id=None, name=None):
    headers = {}
    if user_id:
        headers["x-user-id"] = user_id
    if name:
        headers["x-user-name"] = name
    resp = client.post(
        "/api/pusher/auth",
        json={"socket_id": "1234.5678", "channel_name": channel},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestChannelTokens:
    def test_round_trip(self):
        member = Member(user_id="u1", user_name="Ada")
        token = issue_channel_token("1.2", "presence-room", member)
        payload = verify_channel_token(token, "presence-room")
        assert payload["sid"] == "1.2"
        assert payload["member"]["user_id"] == "u1"

    def test_wrong_channel(self):
        token = issue_channel_token("1.2", "private-a")
        with pytest.raises(ChannelAuthError, match="channel_mismatch"):
            verify_channel_token(token, "private-b")

    def test_garbage(self):
        with pytest.raises(ChannelAuthError):
            verify_channel_token("not-a-token", "private-a")


class TestChannelAuth:
    def test_presence_channel_data(self, client):
        body = _auth(client, "presence-course-1", user_id="u1", name="Ada")
        assert body["auth"]
        data = json.loads(body["channel_data"])
        assert data == {
            "user_id": "u1",
            "user_info": {"userName": "Ada", "userPhotoURL": ""},
        }

    def test_guest_identity(self, client):
        data = json.loads(_auth(client, "presence-course-2")["channel_data"])
        assert data["user_id"].startswith("guest_")
        assert data["user_info"]["userName"] == "Guest User"

    def test_private_channel_has_no_member(self, client):
        body = _auth(client, "private-notes")
        assert "channel_data" not in body

    def test_form_encoded(self, client):
        resp = client.post(
            "/api/pusher/auth",
            data={"socket_id": "1.1", "channel_name": "private-x"},
        )
        assert resp.status_code == 200
        assert resp.json()["auth"]

    def test_missing_fields(self, client):
        resp = client.post("/api/pusher/auth", json={"socket_id": "1.1"})
        assert resp.status_code == 400


class TestChannels:
    def test_public_channel_message(self, client):
        with client.websocket_connect("/api/pusher/ws/course-chat-1") as ws:
            hello = ws.receive_json()
            assert hello["event"] == "pusher:subscription_succeeded"

            resp = client.post(
                "/api/pusher/send-message",
                json={
                    "channel": "course-chat-1",
                    "event": "new-message",
                    "data": {"sender": "Ada", "text": "hi all", "courseData": {"id": 7}},
                },
            )
            assert resp.json() == {"success": True, "delivered": 1}

            msg = ws.receive_json()
            assert msg["event"] == "new-message"
            assert msg["channel"] == "course-chat-1"
            assert msg["data"]["sender"] == "Ada"
            assert msg["data"]["courseData"] == {"id": 7}
            assert msg["data"]["timestamp"]

    def test_invalid_chat_message(self, client):
        resp = client.post(
            "/api/pusher/send-message",
            json={"channel": "course-chat-1", "event": "new-message", "data": {"text": "x"}},
        )
        assert resp.status_code == 422

    def test_no_subscribers(self, client):
        resp = client.post(
            "/api/pusher/send-message",
            json={"channel": "empty-room", "event": "ping", "data": None},
        )
        assert resp.json()["delivered"] == 0

    def test_private_channel_needs_token(self, client):
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect("/api/pusher/ws/private-secret"):
                pass
        assert exc.value.code == 4401

    def test_token_for_other_channel(self, client):
        token = _auth(client, "private-a")["auth"]
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect(f"/api/pusher/ws/private-b?token={token}"):
                pass
        assert exc.value.code == 4403

    def test_presence_members_and_client_events(self, client):
        channel = "presence-study-group"
        t1 = _auth(client, channel, user_id="u1", name="Ada")["auth"]
        t2 = _auth(client, channel, user_id="u2", name="Alan")["auth"]

        with client.websocket_connect(f"/api/pusher/ws/{channel}?token={t1}") as ws1:
            first = ws1.receive_json()
            assert first["data"]["presence"]["ids"] == ["u1"]

            with client.websocket_connect(f"/api/pusher/ws/{channel}?token={t2}") as ws2:
                second = ws2.receive_json()
                assert sorted(second["data"]["presence"]["ids"]) == ["u1", "u2"]
                added = ws1.receive_json()
                assert added["event"] == "pusher:member_added"
                assert added["data"]["id"] == "u2"

                members = client.get(f"/api/pusher/channels/{channel}/members").json()
                assert members["count"] == 2

                ws1.send_json({"event": "client-typing", "data": {"who": "Ada"}})
                typing = ws2.receive_json()
                assert typing["event"] == "client-typing"
                assert typing["data"] == {"who": "Ada"}

                ws1.send_json({"event": "server-only", "data": {}})
                err = ws1.receive_json()
                assert err["event"] == "pusher:error"

                ws2.close()
                removed = ws1.receive_json()
                assert removed["event"] == "pusher:member_removed"
                assert removed["data"]["id"] == "u2"


class _StubSocket:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def accept(self):
        pass

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(json.loads(text))


class TestChannelHub:
    def test_failed_send_is_logged_and_dropped(self, caplog):
        hub = ChannelHub()
        good, broken = _StubSocket(), _StubSocket()

        async def run():
            await hub.subscribe("course-chat-9", good)
            await hub.subscribe("course-chat-9", broken)
            broken.fail = True
            with caplog.at_level(logging.WARNING, logger="courseconnect.modules.realtime.hub"):
                return await hub.trigger("course-chat-9", "new-message", {"text": "hi"})

        delivered = asyncio.run(run())
        assert delivered == 1
        assert good.sent[-1]["event"] == "new-message"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings and warnings[0].channel == "course-chat-9"
        assert "new-message" in warnings[0].getMessage()
        assert len(hub._by_channel["course-chat-9"]) == 1
