import os
import tempfile
import uuid

import pytest

# Settings are read at import time, so the environment is prepared first
_TMP = tempfile.mkdtemp(prefix="courseconnect-tests-")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP}/test.db"
os.environ["MEDIA_DIR"] = os.path.join(_TMP, "media")
os.environ["REDIS_ENABLED"] = "false"
os.environ["UPLOAD_RETRY_DELAY_SECONDS"] = "0"
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("OPENROUTER_API_KEY", None)

from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402


@pytest.fixture(scope="session")
def client():
    # One client for the whole run keeps the database engine on a single loop
    with TestClient(app) as c:
        yield c


def register_and_login(client: TestClient) -> dict[str, str]:
    email = f"student-{uuid.uuid4().hex[:10]}@example.com"
    password = "CorrectHorse42!"
    resp = client.post(
        "/api/auth/register", json={"email": email, "password": password}
    )
    assert resp.status_code == 201, resp.text
    resp = client.post(
        "/api/auth/login", data={"username": email, "password": password}
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register_and_login(client)


@pytest.fixture
def make_user(client):
    return lambda: register_and_login(client)
