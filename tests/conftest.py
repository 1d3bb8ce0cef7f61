"""Shared fixtures: an isolated app per test on in-memory SQLite."""

import pytest

from api import create_app

PASSWORD = "correcthorse"


@pytest.fixture
def app(tmp_path):
    (tmp_path / "index.html").write_text("<h1>Welcome to Chirpy</h1>")
    app = create_app("testing", FILESERVER_ROOT=str(tmp_path))
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(client):
    def _make_user(email="walt@example.com", password=PASSWORD):
        resp = client.post("/api/users", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _make_user


@pytest.fixture
def login(client):
    def _login(email="walt@example.com", password=PASSWORD):
        resp = client.post("/api/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()

    return _login


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
