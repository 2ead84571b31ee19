import os

# Configure the database before `models` builds its engine at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("APP_ENV", "test")

import httpx  # noqa: E402
import pytest  # noqa: E402

from api import create_app  # noqa: E402
from models import storage  # noqa: E402

PASSWORD = "s3cret-pass"


class UpstreamStub:
    """httpx.MockTransport handler standing in for the OAuth server and content API."""

    def __init__(self):
        self.token_calls = 0
        self.api_calls = 0
        self.token_status = 200
        self.api_status = 200
        self.expires_in = 3600
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/oauth2/token":
            self.token_calls += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(
                200,
                json={
                    "access_token": f"upstream-token-{self.token_calls}",
                    "token_type": "bearer",
                    "expires_in": self.expires_in,
                },
            )
        self.api_calls += 1
        if self.api_status != 200:
            return httpx.Response(self.api_status, json={"message": "nope"})
        if "/verses/by_chapter/" in request.url.path:
            return httpx.Response(200, json={"verses": [{"verse_key": "1:1"}]})
        return httpx.Response(200, json={"chapters": [{"id": 1, "name_simple": "Al-Fatihah"}]})


@pytest.fixture()
def upstream():
    return UpstreamStub()


@pytest.fixture()
def app(upstream):
    storage.reset()
    http = httpx.Client(transport=httpx.MockTransport(upstream))
    app = create_app("testing", http=http)
    yield app
    http.close()
    storage.close()


@pytest.fixture()
def client(app):
    return app.test_client()


def register(client, username="alice", role=None, email=None, password=PASSWORD):
    payload = {
        "username": username,
        "name": username.title(),
        "email": email or f"{username}@example.com",
        "password": password,
    }
    if role:
        payload["role"] = role
    return client.post("/api/v1/auth/register", json=payload)


def login(client, username="alice", password=PASSWORD):
    return client.post("/api/v1/auth/login", json={"username": username, "password": password})


@pytest.fixture()
def member_tokens(client):
    assert register(client, "member1").status_code == 201
    return login(client, "member1").get_json()["result"]


@pytest.fixture()
def admin_tokens(client):
    assert register(client, "admin1", role="admin").status_code == 201
    return login(client, "admin1").get_json()["result"]
