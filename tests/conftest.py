import base64
import time
from typing import Any

import jwt
import pytest
import requests
from flask import Flask

from easy_auth0 import JWTVerifier, JWTVerifyOptions, TokenBundle, User

DOMAIN = "tenant.eu.auth0.com"
ISSUER = f"https://{DOMAIN}/"
CLIENT_ID = "test-client-id"
CLIENT_SECRET = "test-client-secret-that-is-long-enough-for-hs256"
CONNECTION = "Username-Password-Authentication"


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def make_token():
    """
    Factory fixture minting HS256 ID tokens for the test tenant.

    Usage in tests:
        token = make_token(sub="auth0|1", exp_in=3600)
    """

    def _make(
        *,
        sub: str = "auth0|1",
        exp_in: int = 3600,
        issuer: str = ISSUER,
        audience: str = CLIENT_ID,
        secret: str = CLIENT_SECRET,
        **claims: Any,
    ) -> str:
        now = int(time.time())
        payload = {
            "iss": issuer,
            "aud": audience,
            "sub": sub,
            "iat": now,
            "exp": now + exp_in,
            **claims,
        }
        return jwt.encode(payload, secret, algorithm="HS256")

    return _make


@pytest.fixture
def basic_header():
    def _make(username: str, password: str) -> str:
        raw = f"{username}:{password}".encode()
        return "Basic " + base64.b64encode(raw).decode("ascii")

    return _make


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} {self.reason}", response=self)


class FakeSession:
    """
    Records requests and answers from queued responses.

    `fetch_token_result` is returned (or raised) by fetch_token; get/post
    pop from per-method queues.
    """

    def __init__(self):
        self.calls: list[tuple[str, str, dict[str, Any]]] = []
        self.fetch_token_result: Any = None
        self.token: Any = None
        self.responses: dict[str, list[Any]] = {"GET": [], "POST": []}

    def queue(self, method: str, response: Any) -> None:
        self.responses[method].append(response)

    def _answer(self, method: str, url: str, kwargs: dict[str, Any]) -> Any:
        self.calls.append((method, url, kwargs))
        response = self.responses[method].pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def fetch_token(self, url: str, **kwargs: Any) -> Any:
        self.calls.append(("TOKEN", url, kwargs))
        if isinstance(self.fetch_token_result, Exception):
            raise self.fetch_token_result
        # Like Authlib, the fetched token stays on the session.
        self.token = self.fetch_token_result
        return self.fetch_token_result

    def get(self, url: str, **kwargs: Any) -> Any:
        return self._answer("GET", url, kwargs)

    def post(self, url: str, **kwargs: Any) -> Any:
        return self._answer("POST", url, kwargs)


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fake_response():
    return FakeResponse


class FakeProvider:
    """
    Duck-typed IdentityProvider backed by a dict of accounts.

    Tokens are real HS256 JWTs so the verifier runs for real.
    """

    def __init__(self, make_token):
        self._make_token = make_token
        self._verifier = JWTVerifier(
            CLIENT_SECRET, JWTVerifyOptions(issuer=ISSUER, audience=CLIENT_ID)
        )
        self.accounts: dict[str, tuple[str, User]] = {}
        self.profiles: dict[str, User] = {}
        self.refresh_tokens: set[str] = set()
        self.users: list[User] = []
        self.list_users_audiences: list[str] = []
        self.reset_error: Exception | None = None
        self.rotate_refresh_token = False
        self._counter = 0

    def add_account(self, username: str, password: str, user: User) -> None:
        self.accounts[username] = (password, user)

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def login(self, username: str, password: str) -> TokenBundle:
        account = self.accounts.get(username)
        if account is None or account[0] != password:
            raise ValueError("Wrong email or password.")
        n = self._next()
        access_token = f"opaque-{n}"
        refresh_token = f"refresh-{n}"
        self.profiles[access_token] = account[1]
        self.refresh_tokens.add(refresh_token)
        return TokenBundle(
            access_token=access_token,
            expires_in=86400,
            id_token=self._make_token(sub=f"auth0|{username}", nonce=str(n)),
            refresh_token=refresh_token,
            token_type="Bearer",
        )

    def user_info(self, access_token: str) -> User:
        return self.profiles[access_token]

    def reset_password(self, email: str) -> None:
        if self.reset_error is not None:
            raise self.reset_error

    def refresh(self, refresh_token: str) -> TokenBundle:
        from easy_auth0 import RefreshFailedError

        if refresh_token not in self.refresh_tokens:
            raise RefreshFailedError("Refresh token request failed: 403 - Forbidden")
        n = self._next()
        return TokenBundle(
            access_token=f"opaque-{n}",
            expires_in=7200,
            id_token=self._make_token(nonce=str(n)),
            refresh_token=f"rotated-{n}" if self.rotate_refresh_token else None,
        )

    def list_users(self, audience: str) -> list[User]:
        self.list_users_audiences.append(audience)
        return list(self.users)

    def verify(self, token: str):
        return self._verifier.verify(token)


@pytest.fixture
def fake_provider(make_token) -> FakeProvider:
    provider = FakeProvider(make_token)
    provider.add_account(
        "alice@example.com",
        "s3cret:with:colons",
        User(nickname="alice", display_name="Alice Doe", email="alice@example.com"),
    )
    provider.add_account(
        "alice",
        "other-password",
        User(nickname="alice", display_name="Alice Doe", email="alice@example.com"),
    )
    provider.add_account(
        "bob@example.com",
        "hunter2",
        User(nickname="bob", display_name="Bob Roe", email="bob@example.com"),
    )
    return provider


class FakeRedis:
    """
    Minimal redis stub for RedisSessionStore tests.
    Stores bytes under keys and supports get/set/delete.
    """

    def __init__(self):
        self._store: dict[str, bytes] = {}

    def get(self, key: str):
        return self._store.get(key)

    def set(self, key: str, value: str | bytes):
        if isinstance(value, str):
            value = value.encode("utf-8")
        self._store[key] = value

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._store.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
