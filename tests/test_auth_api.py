"""HTTP tests for /api/login, /api/refresh, /api/revoke and /api/users."""

import re
from datetime import datetime, timedelta, timezone

from models.refresh_token import RefreshToken
from utils.security import decode_access_token

from tests.conftest import PASSWORD, bearer


def _refresh_row(app, token):
    storage = app.extensions["chirpy.storage"]
    with app.app_context():
        return storage.get_refresh_token(token)


class TestUsers:
    def test_create_user(self, client):
        resp = client.post("/api/users", json={"email": "Walt@Example.com", "password": PASSWORD})
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["email"] == "walt@example.com"
        assert set(body) == {"id", "created_at", "updated_at", "email"}

    def test_duplicate_email(self, client, make_user):
        make_user()
        resp = client.post("/api/users", json={"email": "walt@example.com", "password": PASSWORD})
        assert resp.status_code == 409

    def test_invalid_body(self, client):
        resp = client.post("/api/users", json={"email": "not-an-email"})
        assert resp.status_code == 422
        assert resp.get_json()["error"] == "VALIDATION_ERROR"

    def test_overlong_password(self, client):
        resp = client.post("/api/users", json={"email": "walt@example.com", "password": "x" * 5000})
        assert resp.status_code == 422
        assert "password" in resp.get_json()["details"]

    def test_update_with_overlong_password(self, client, make_user, login):
        make_user()
        tokens = login()
        resp = client.put(
            "/api/users",
            json={"email": "walt@example.com", "password": "x" * 5000},
            headers=bearer(tokens["token"]),
        )
        assert resp.status_code == 422

    def test_update_requires_token(self, client, make_user):
        make_user()
        resp = client.put("/api/users", json={"email": "heisenberg@example.com", "password": PASSWORD})
        assert resp.status_code == 401

    def test_update_user(self, client, make_user, login):
        make_user()
        tokens = login()
        resp = client.put(
            "/api/users",
            json={"email": "heisenberg@example.com", "password": "bluecrystal"},
            headers=bearer(tokens["token"]),
        )
        assert resp.status_code == 200
        assert resp.get_json()["email"] == "heisenberg@example.com"

        assert client.post("/api/login", json={"email": "walt@example.com", "password": PASSWORD}).status_code == 401
        login("heisenberg@example.com", "bluecrystal")


class TestLogin:
    def test_login(self, app, client, make_user):
        user = make_user()
        resp = client.post("/api/login", json={"email": "walt@example.com", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.get_json()

        assert body["id"] == user["id"]
        assert body["email"] == "walt@example.com"
        assert decode_access_token(body["token"], app.config["JWT_SECRET"]) == user["id"]
        assert re.fullmatch(r"[0-9a-f]{64}", body["refresh_token"])

        record = _refresh_row(app, body["refresh_token"])
        assert record.user_id == user["id"]
        assert record.revoked_at is None
        expected = datetime.now(timezone.utc) + timedelta(hours=144)
        assert abs(record.expires_at - expected) < timedelta(minutes=1)

    def test_wrong_password(self, client, make_user):
        make_user()
        resp = client.post("/api/login", json={"email": "walt@example.com", "password": "batterystaple"})
        assert resp.status_code == 401

    def test_unknown_email_matches_wrong_password(self, client, make_user):
        make_user()
        wrong = client.post("/api/login", json={"email": "walt@example.com", "password": "batterystaple"})
        unknown = client.post("/api/login", json={"email": "jesse@example.com", "password": PASSWORD})
        assert unknown.status_code == 401
        assert unknown.get_json() == wrong.get_json()


class TestRefreshAndRevoke:
    def test_refresh(self, app, client, make_user, login):
        user = make_user()
        tokens = login()
        resp = client.post("/api/refresh", headers=bearer(tokens["refresh_token"]))
        assert resp.status_code == 200
        assert decode_access_token(resp.get_json()["token"], app.config["JWT_SECRET"]) == user["id"]

    def test_refresh_with_access_token_fails(self, client, make_user, login):
        make_user()
        tokens = login()
        assert client.post("/api/refresh", headers=bearer(tokens["token"])).status_code == 401

    def test_refresh_without_header(self, client):
        resp = client.post("/api/refresh")
        assert resp.status_code == 401
        assert resp.get_json()["error"] == "UNAUTHORIZED"

    def test_refresh_after_revoke(self, client, make_user, login):
        make_user()
        tokens = login()
        assert client.post("/api/revoke", headers=bearer(tokens["refresh_token"])).status_code == 204
        assert client.post("/api/refresh", headers=bearer(tokens["refresh_token"])).status_code == 401

    def test_refresh_after_expiry(self, app, client, make_user):
        user = make_user()
        storage = app.extensions["chirpy.storage"]
        with app.app_context():
            storage.insert_refresh_token("f" * 64, user["id"], datetime.now(timezone.utc) - timedelta(hours=1))
        assert client.post("/api/refresh", headers=bearer("f" * 64)).status_code == 401

    def test_double_revoke(self, app, client, make_user, login):
        make_user()
        tokens = login()
        assert client.post("/api/revoke", headers=bearer(tokens["refresh_token"])).status_code == 204
        first = _refresh_row(app, tokens["refresh_token"]).revoked_at
        assert first is not None

        assert client.post("/api/revoke", headers=bearer(tokens["refresh_token"])).status_code == 204
        assert _refresh_row(app, tokens["refresh_token"]).revoked_at == first

    def test_revoke_unknown_token(self, client):
        assert client.post("/api/revoke", headers=bearer("0" * 64)).status_code == 204

    def test_revoke_without_header(self, client):
        assert client.post("/api/revoke").status_code == 401

    def test_revoke_keeps_row(self, app, client, make_user, login):
        make_user()
        tokens = login()
        client.post("/api/revoke", headers=bearer(tokens["refresh_token"]))
        storage = app.extensions["chirpy.storage"]
        with app.app_context():
            assert storage.count(RefreshToken) == 1
