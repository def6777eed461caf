"""Session store implementations.

This module provides implementations of the SessionStore protocol, tracking
which access tokens belong to which logged-in user.

Implementations:
- InMemorySessionStore: In-process dicts behind a lock (single instance)
- RedisSessionStore: Shared store via Redis (multi-instance deployments)

Both keep three indexes:
- email -> Credentials
- access token -> email
- refresh token -> email

The indexes are updated one after the other, not transactionally. Readers
treat an index entry whose target record no longer matches as absent.

Note:
    ``expires_in`` is stored but never enforced here. A session stays
    tracked until logout or re-login; token validity is re-checked by the
    verifier on every authorize call.
"""

from __future__ import annotations

import json
import threading
from typing import Any, Final

from .models import Credentials

_DEFAULT_PREFIX: Final[str] = "easy_auth0:"
"""Default Redis key prefix."""


class InMemorySessionStore:
    """In-process session store.

    Thread Safety:
        Every operation runs under one lock, so concurrent logins, refreshes
        and logouts from multiple threads cannot interleave their writes.

    Example:
        ```python
        store = InMemorySessionStore()
        store.record(credentials)

        assert store.contains(credentials.access_token)
        assert store.forget(credentials.access_token) is True
        ```

    Attributes:
        _by_email: email -> Credentials.
        _by_token: access token -> email.
        _by_refresh: refresh token -> email.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_email: dict[str, Credentials] = {}
        self._by_token: dict[str, str] = {}
        self._by_refresh: dict[str, str] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_email)

    def __contains__(self, access_token: object) -> bool:
        return isinstance(access_token, str) and self.contains(access_token)

    def record(self, credentials: Credentials) -> None:
        email = credentials.user.email

        with self._lock:
            previous = self._by_email.pop(email, None)
            if previous is not None:
                self._unindex(previous)

            self._by_email[email] = credentials
            self._by_token[credentials.access_token] = email
            if credentials.refresh_token:
                self._by_refresh[credentials.refresh_token] = email

    def lookup(self, access_token: str) -> Credentials | None:
        with self._lock:
            email = self._by_token.get(access_token)
            if email is None:
                return None
            credentials = self._by_email.get(email)
            if credentials is None or credentials.access_token != access_token:
                return None
            return credentials

    def find_by_refresh_token(self, refresh_token: str) -> Credentials | None:
        with self._lock:
            email = self._by_refresh.get(refresh_token)
            if email is None:
                return None
            credentials = self._by_email.get(email)
            if credentials is None or credentials.refresh_token != refresh_token:
                return None
            return credentials

    def replace_access_token(
        self, credentials: Credentials, access_token: str, expires_in: int
    ) -> Credentials | None:
        with self._lock:
            if self._by_email.get(credentials.user.email) is not credentials:
                return None
            self._by_token.pop(credentials.access_token, None)
            self._by_token[access_token] = credentials.user.email
            credentials.access_token = access_token
            credentials.expires_in = expires_in
            return credentials

    def forget(self, access_token: str) -> bool:
        with self._lock:
            email = self._by_token.pop(access_token, None)
            if email is None:
                return False

            credentials = self._by_email.get(email)
            if credentials is not None and credentials.access_token == access_token:
                del self._by_email[email]
                if credentials.refresh_token:
                    self._by_refresh.pop(credentials.refresh_token, None)
            return True

    def contains(self, access_token: str) -> bool:
        with self._lock:
            return access_token in self._by_token

    def _unindex(self, credentials: Credentials) -> None:
        # Caller holds the lock.
        self._by_token.pop(credentials.access_token, None)
        if credentials.refresh_token:
            self._by_refresh.pop(credentials.refresh_token, None)


class RedisSessionStore:
    """Redis-backed session store shared between processes.

    Storage Format:
        - ``<prefix>user:<email>``: JSON of ``Credentials.to_dict()``
        - ``<prefix>access:<token>``: email
        - ``<prefix>refresh:<token>``: email

    Dependencies:
        Requires a redis client: pip install redis

    Example:
        ```python
        import redis

        client = redis.Redis(host="localhost", port=6379, decode_responses=True)
        store = RedisSessionStore(redis_client=client)
        ```

    Note:
        Each Redis call is atomic, the sequence of calls in one operation is
        not. Records returned by this store are snapshots; refresh updates go
        through ``replace_access_token`` so they are written back.
    """

    def __init__(self, redis_client: Any, prefix: str = _DEFAULT_PREFIX) -> None:
        """Initialize Redis session store.

        Args:
            redis_client: Redis client instance (from redis package).
                Must support get(), set() and delete().
            prefix: Namespace prepended to every key.
        """
        self._client = redis_client
        self._prefix = prefix

    def _user_key(self, email: str) -> str:
        return f"{self._prefix}user:{email}"

    def _access_key(self, token: str) -> str:
        return f"{self._prefix}access:{token}"

    def _refresh_key(self, token: str) -> str:
        return f"{self._prefix}refresh:{token}"

    def _get_text(self, key: str) -> str | None:
        data = self._client.get(key)
        if data is None:
            return None
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return str(data)

    def _load(self, email: str) -> Credentials | None:
        data = self._get_text(self._user_key(email))
        if data is None:
            return None
        try:
            return Credentials.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise RuntimeError("Failed to deserialize stored session") from e

    def _save(self, credentials: Credentials) -> None:
        self._client.set(
            self._user_key(credentials.user.email),
            json.dumps(credentials.to_dict()),
        )

    def record(self, credentials: Credentials) -> None:
        email = credentials.user.email

        previous = self._load(email)
        if previous is not None:
            self._client.delete(self._access_key(previous.access_token))
            if previous.refresh_token:
                self._client.delete(self._refresh_key(previous.refresh_token))

        self._save(credentials)
        self._client.set(self._access_key(credentials.access_token), email)
        if credentials.refresh_token:
            self._client.set(self._refresh_key(credentials.refresh_token), email)

    def lookup(self, access_token: str) -> Credentials | None:
        email = self._get_text(self._access_key(access_token))
        if email is None:
            return None
        credentials = self._load(email)
        if credentials is None or credentials.access_token != access_token:
            return None
        return credentials

    def find_by_refresh_token(self, refresh_token: str) -> Credentials | None:
        email = self._get_text(self._refresh_key(refresh_token))
        if email is None:
            return None
        credentials = self._load(email)
        if credentials is None or credentials.refresh_token != refresh_token:
            return None
        return credentials

    def replace_access_token(
        self, credentials: Credentials, access_token: str, expires_in: int
    ) -> Credentials | None:
        current = self._load(credentials.user.email)
        if current is None or current.refresh_token != credentials.refresh_token:
            return None

        self._client.delete(self._access_key(credentials.access_token))
        self._client.set(self._access_key(access_token), credentials.user.email)
        credentials.access_token = access_token
        credentials.expires_in = expires_in
        self._save(credentials)
        return credentials

    def forget(self, access_token: str) -> bool:
        key = self._access_key(access_token)
        email = self._get_text(key)
        if email is None:
            return False

        self._client.delete(key)
        credentials = self._load(email)
        if credentials is not None and credentials.access_token == access_token:
            self._client.delete(self._user_key(email))
            if credentials.refresh_token:
                self._client.delete(self._refresh_key(credentials.refresh_token))
        return True

    def contains(self, access_token: str) -> bool:
        return self._client.get(self._access_key(access_token)) is not None
