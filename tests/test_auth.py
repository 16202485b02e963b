class TestAuth:
    def test_health(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    def test_jwks_published(self, client):
        keys = client.get("/.well-known/jwks.json").json()["keys"]
        assert keys[0]["kid"] == "v1"
        assert keys[0]["kty"] == "RSA"

    def test_login_and_me(self, client, auth_headers):
        resp = client.get("/api/users/me", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["email"].endswith("@example.com")

    def test_bad_token(self, client):
        resp = client.get("/api/users/me", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401
