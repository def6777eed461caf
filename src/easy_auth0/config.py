"""Helper configuration.

Settings are passed explicitly to ``Auth0Helper.from_settings``; nothing is
kept in module-level globals.

Environment variables (``AUTH0_`` prefix by default):

- ``AUTH0_DOMAIN``: tenant domain (required)
- ``AUTH0_CLIENT_ID``: application client id (required)
- ``AUTH0_CLIENT_SECRET``: application client secret (required)
- ``AUTH0_CONNECTION``: database connection (required)
- ``AUTH0_API_AUDIENCE``: management API identifier for user listing
- ``AUTH0_LEEWAY``: token verification leeway in seconds (default 1)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from dotenv import load_dotenv

_REQUIRED = ("DOMAIN", "CLIENT_ID", "CLIENT_SECRET", "CONNECTION")


@dataclass(frozen=True, slots=True)
class Auth0Settings:
    """Tenant and application settings."""

    domain: str
    client_id: str
    client_secret: str
    connection: str
    audience: str | None = None
    leeway: int = 1

    def __repr__(self) -> str:
        return (
            f"Auth0Settings(domain={self.domain!r}, client_id={self.client_id!r}, "
            f"client_secret='***', connection={self.connection!r}, "
            f"audience={self.audience!r}, leeway={self.leeway!r})"
        )

    @classmethod
    def from_env(
        cls,
        prefix: str = "AUTH0_",
        *,
        environ: Mapping[str, str] | None = None,
        load_env_file: bool = True,
    ) -> Auth0Settings:
        """Read settings from environment variables.

        Args:
            prefix: Variable name prefix.
            environ: Mapping to read instead of ``os.environ``.
            load_env_file: Load a ``.env`` file (python-dotenv) first. Values
                already in the environment are not overridden.

        Raises:
            ValueError: If a required variable is missing or AUTH0_LEEWAY is
                not an integer.
        """
        if load_env_file and environ is None:
            load_dotenv()
        env = os.environ if environ is None else environ

        missing = [f"{prefix}{name}" for name in _REQUIRED if not env.get(f"{prefix}{name}")]
        if missing:
            raise ValueError(
                "Missing required environment variables for Auth0 configuration: "
                + ", ".join(missing)
            )

        leeway_raw = env.get(f"{prefix}LEEWAY") or "1"
        try:
            leeway = int(leeway_raw)
        except ValueError as e:
            raise ValueError(f"{prefix}LEEWAY must be an integer, got {leeway_raw!r}") from e

        return cls(
            domain=env[f"{prefix}DOMAIN"],
            client_id=env[f"{prefix}CLIENT_ID"],
            client_secret=env[f"{prefix}CLIENT_SECRET"],
            connection=env[f"{prefix}CONNECTION"],
            audience=env.get(f"{prefix}API_AUDIENCE") or None,
            leeway=leeway,
        )
