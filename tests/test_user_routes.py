"""
Tests for /api/user endpoints and /health.

Uses FastAPI TestClient over in-memory services (see conftest).
"""

from vaultkeeper.core.auth import TokenKind


class TestRegister:

    def test_register_returns_phrase_and_sets_cookies(self, client):
        resp = client.post("/api/user/register", json={"username": "alice", "password": "pw123"})

        assert resp.status_code == 200
        phrase = resp.json()["hash"]
        assert len(phrase) == 14
        # values containing "/" are sent quoted
        assert resp.cookies["key"].strip('"') == phrase
        assert resp.cookies["accesstoken"]
        assert resp.cookies["refreshtoken"]

    def test_cookie_attributes(self, client):
        resp = client.post("/api/user/register", json={"username": "alice", "password": "pw123"})

        set_cookies = resp.headers.get_list("set-cookie")
        by_name = {h.split("=", 1)[0]: h.lower() for h in set_cookies}
        assert "httponly" in by_name["accesstoken"]
        assert "max-age=900" in by_name["accesstoken"]
        assert f"max-age={60 * 24 * 3600}" in by_name["refreshtoken"]
        assert f"max-age={10000 * 3600}" in by_name["key"]
        assert "httponly" in by_name["key"]

    def test_duplicate(self, client, alice):
        resp = client.post("/api/user/register", json={"username": "alice", "password": "x"})
        assert resp.status_code == 409

    def test_empty_fields(self, client):
        resp = client.post("/api/user/register", json={"username": "", "password": "pw"})
        assert resp.status_code == 400

    def test_malformed_body(self, client):
        resp = client.post("/api/user/register", json={"username": "alice"})
        assert resp.status_code == 422

    def test_password_over_72_bytes(self, client):
        resp = client.post("/api/user/register", json={"username": "long", "password": "a" * 73})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "password must not exceed 72 bytes"


class TestLogin:

    def test_login_returns_same_phrase(self, client, make_client):
        registered = client.post("/api/user/register", json={"username": "alice", "password": "pw123"})

        resp = make_client().post("/api/user/login", json={"username": "alice", "password": "pw123"})

        assert resp.status_code == 200
        assert resp.json()["hash"] == registered.json()["hash"]
        assert resp.cookies["key"].strip('"') == registered.json()["hash"]

    def test_unknown_user(self, client):
        resp = client.post("/api/user/login", json={"username": "ghost", "password": "pw"})
        assert resp.status_code == 404

    def test_wrong_password(self, client, alice):
        resp = client.post("/api/user/login", json={"username": "alice", "password": "nope"})
        assert resp.status_code == 401

    def test_password_over_72_bytes(self, client, alice):
        resp = client.post("/api/user/login", json={"username": "alice", "password": "a" * 73})
        assert resp.status_code == 400


class TestRefresh:

    def test_refresh_sets_new_access_cookie(self, alice, vault):
        resp = alice.post("/api/user/refresh")

        assert resp.status_code == 200
        claims = vault.tokens.verify(resp.cookies["accesstoken"], TokenKind.ACCESS)
        assert claims.username == "alice"

    def test_refresh_without_cookie(self, client):
        resp = client.post("/api/user/refresh")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "unauthorized"

    def test_access_token_cannot_refresh(self, client, vault):
        access = vault.tokens.issue(1, "alice", TokenKind.ACCESS)
        client.cookies.set("refreshtoken", access)
        resp = client.post("/api/user/refresh")
        assert resp.status_code == 401


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_services_missing_returns_503(settings):
    from fastapi.testclient import TestClient
    from vaultkeeper.api.main import create_app

    app = create_app(settings)
    resp = TestClient(app).post("/api/user/login", json={"username": "a", "password": "b"})
    assert resp.status_code == 503


class TestCors:

    PREFLIGHT = {
        "Origin": "http://localhost:3000",
        "Access-Control-Request-Method": "POST",
    }

    def test_off_by_default(self, client):
        resp = client.options("/api/user/login", headers=self.PREFLIGHT)
        assert "access-control-allow-origin" not in resp.headers

    def test_configured_origin_allowed(self, settings, vault):
        from fastapi.testclient import TestClient
        from vaultkeeper.api.main import create_app

        settings = settings.model_copy(update={"cors_origins": ["http://localhost:3000"]})
        client = TestClient(create_app(settings, services=vault))

        resp = client.options("/api/user/login", headers=self.PREFLIGHT)

        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"
        assert resp.headers["access-control-allow-credentials"] == "true"

    def test_other_origin_not_allowed(self, settings, vault):
        from fastapi.testclient import TestClient
        from vaultkeeper.api.main import create_app

        settings = settings.model_copy(update={"cors_origins": ["https://vault.example"]})
        client = TestClient(create_app(settings, services=vault))

        resp = client.options("/api/user/login", headers=self.PREFLIGHT)

        assert "access-control-allow-origin" not in resp.headers
