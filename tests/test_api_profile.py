import io

from PIL import Image
from sqlalchemy.exc import OperationalError

from courseconnect.core.db_services import UserProfileService


def _png(width=800, height=600) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(200, 40, 40)).save(buf, format="PNG")
    return buf.getvalue()


def _offline(monkeypatch):
    async def unreachable(self, user_id):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(UserProfileService, "get_or_create_profile", unreachable)


class TestProfile:
    def test_auto_created(self, client, auth_headers):
        resp = client.get("/api/profile", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["email"].endswith("@example.com")
        assert body["notificationSettings"] == {
            "chat": True,
            "assignments": True,
            "groups": False,
        }
        assert body["offline"] is False

    def test_update(self, client, auth_headers):
        resp = client.put(
            "/api/profile",
            json={"displayName": "Ada", "school": "Analytical U", "gpa": "4.0"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["displayName"] == "Ada"
        assert body["school"] == "Analytical U"

        again = client.get("/api/profile", headers=auth_headers).json()
        assert again["gpa"] == "4.0"

    def test_field_limits(self, client, auth_headers):
        resp = client.put(
            "/api/profile", json={"displayName": "x" * 101}, headers=auth_headers
        )
        assert resp.status_code == 422


class TestNotifications:
    def test_defaults_and_partial_update(self, client, auth_headers):
        resp = client.get("/api/profile/notifications", headers=auth_headers)
        assert resp.json() == {
            "settings": {"chat": True, "assignments": True, "groups": False}
        }
        resp = client.put(
            "/api/profile/notifications",
            json={"settings": {"groups": True}},
            headers=auth_headers,
        )
        assert resp.json()["settings"] == {
            "chat": True,
            "assignments": True,
            "groups": True,
        }


class TestOfflineFallback:
    def test_cached_copy_served(self, client, auth_headers, monkeypatch):
        client.put("/api/profile", json={"bio": "Loves math"}, headers=auth_headers)
        _offline(monkeypatch)
        resp = client.get("/api/profile", headers=auth_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["offline"] is True
        assert body["bio"] == "Loves math"

    def test_no_cache_is_unavailable(self, client, auth_headers, monkeypatch):
        _offline(monkeypatch)
        resp = client.get("/api/profile", headers=auth_headers)
        assert resp.status_code == 503

    def test_write_while_offline(self, client, auth_headers, monkeypatch):
        _offline(monkeypatch)
        resp = client.put("/api/profile", json={"bio": "x"}, headers=auth_headers)
        assert resp.status_code == 503

    def test_notifications_write_while_offline(self, client, auth_headers, monkeypatch):
        _offline(monkeypatch)
        resp = client.put(
            "/api/profile/notifications",
            json={"settings": {"groups": True}},
            headers=auth_headers,
        )
        assert resp.status_code == 503

    def test_photo_write_while_offline(self, client, auth_headers, monkeypatch):
        _offline(monkeypatch)
        resp = client.post(
            "/api/profile/photo",
            files={"file": ("me.png", _png(100, 100), "image/png")},
            headers=auth_headers,
        )
        assert resp.status_code == 503
        assert resp.json()["detail"] == "Profile service is unavailable"


class TestPhotoUpload:
    def test_stored_and_served(self, client, auth_headers):
        resp = client.post(
            "/api/profile/photo",
            files={"file": ("me.png", _png(), "image/png")},
            headers=auth_headers,
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["source"] == "store"
        assert body["attempts"] == 1
        assert body["photoUrl"].startswith("/media/profile-pictures/user_")

        served = client.get(body["photoUrl"])
        assert served.status_code == 200
        with Image.open(io.BytesIO(served.content)) as img:
            assert img.format == "JPEG"
            assert img.width == 400

        profile = client.get("/api/profile", headers=auth_headers).json()
        assert profile["photoUrl"] == body["photoUrl"]

    def test_falls_back_to_data_url(self, client, auth_headers, monkeypatch):
        from courseconnect.modules.media import media_store

        def broken(path, data):
            raise OSError("disk full")

        monkeypatch.setattr(media_store, "save", broken)
        resp = client.post(
            "/api/profile/photo",
            files={"file": ("me.png", _png(100, 100), "image/png")},
            headers=auth_headers,
        )
        body = resp.json()
        assert body["source"] == "data_url"
        assert body["attempts"] == 3
        assert body["photoUrl"].startswith("data:image/jpeg;base64,")

    def test_rejects_non_images(self, client, auth_headers):
        resp = client.post(
            "/api/profile/photo",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth_headers,
        )
        assert resp.status_code == 400
        resp = client.post(
            "/api/profile/photo",
            files={"file": ("fake.png", b"not really a png", "image/png")},
            headers=auth_headers,
        )
        assert resp.status_code == 400
