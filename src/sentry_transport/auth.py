"""Authentication header construction."""

from __future__ import annotations

from typing import Mapping

from .dsn import Dsn
from .version import __version__

PROTOCOL_VERSION = 7
DEFAULT_CLIENT_NAME = "sentry-transport-python"
CONTENT_TYPE = "application/json"
AUTH_HEADER = "X-Sentry-Auth"


def client_identifier(name: str = DEFAULT_CLIENT_NAME, version: str = __version__) -> str:
    return f"{name}/{version}"


class AuthManager:
    """Formats the auth header and request headers for one connection target."""

    def __init__(self, dsn: Dsn, client: str | None = None) -> None:
        self.dsn = dsn
        self.client = client or client_identifier()

    @property
    def has_secret(self) -> bool:
        return bool(self.dsn.secret_key)

    def auth_header(self, timestamp: float) -> str:
        """Render the ``X-Sentry-Auth`` value for one request.

        The secret key is only included when the connection string carried one.
        """
        fields = [
            ("sentry_version", str(PROTOCOL_VERSION)),
            ("sentry_client", self.client),
            ("sentry_timestamp", str(int(timestamp))),
            ("sentry_key", self.dsn.public_key),
        ]
        if self.has_secret:
            fields.append(("sentry_secret", self.dsn.secret_key or ""))
        return "Sentry " + ", ".join(f"{key}={value}" for key, value in fields)

    def add_http_headers(
        self,
        timestamp: float,
        *layers: Mapping[str, str] | None,
    ) -> dict[str, str]:
        """Merge the mandatory headers with caller layers, last write wins.

        Header names compare case-insensitively; an override keeps the caller's spelling.
        """
        merged: dict[str, str] = {
            "Content-Type": CONTENT_TYPE,
            AUTH_HEADER: self.auth_header(timestamp),
        }
        for layer in layers:
            for name, value in (layer or {}).items():
                for existing in [key for key in merged if key.lower() == name.lower()]:
                    del merged[existing]
                merged[name] = value
        return merged


__all__ = [
    "AUTH_HEADER",
    "CONTENT_TYPE",
    "DEFAULT_CLIENT_NAME",
    "PROTOCOL_VERSION",
    "AuthManager",
    "client_identifier",
]
