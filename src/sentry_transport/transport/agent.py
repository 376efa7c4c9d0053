"""Connection agent selection, honoring proxy and no-proxy settings."""

from __future__ import annotations

import os
import ssl
from dataclasses import dataclass, field
from typing import Mapping
from urllib.parse import urlsplit

import httpx

from ..dsn import DEFAULT_PORTS, Dsn
from ..logger import BoundLogger, create_logger


@dataclass(frozen=True)
class ProxyEnvironment:
    """Snapshot of the proxy-related environment, taken once."""

    http_proxy: str | None = None
    https_proxy: str | None = None
    all_proxy: str | None = None
    no_proxy: str | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "ProxyEnvironment":
        source = os.environ if environ is None else environ

        def read(name: str) -> str | None:
            value = source.get(name) or source.get(name.upper())
            return value or None

        return cls(
            http_proxy=read("http_proxy"),
            https_proxy=read("https_proxy"),
            all_proxy=read("all_proxy"),
            no_proxy=read("no_proxy"),
        )

    def proxy_for(self, scheme: str) -> str | None:
        if scheme == "https":
            return self.https_proxy or self.http_proxy or self.all_proxy
        return self.http_proxy or self.all_proxy

    def exclusions(self) -> list[str]:
        if not self.no_proxy:
            return []
        return [entry.strip().lower() for entry in self.no_proxy.split(",") if entry.strip()]


@dataclass(frozen=True)
class ProxyTarget:
    protocol: str
    host: str
    port: int

    @classmethod
    def from_url(cls, url: str) -> "ProxyTarget":
        normalized = url if "://" in url else f"http://{url}"
        parts = urlsplit(normalized)
        protocol = parts.scheme.lower()
        if not parts.hostname:
            raise ValueError(f"Proxy URL has no host: {url}")
        return cls(
            protocol=protocol,
            host=parts.hostname,
            port=parts.port or DEFAULT_PORTS.get(protocol, 80),
        )

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.protocol}://{host}:{self.port}"


@dataclass(frozen=True)
class Agent:
    """The connection manager bound to one transport for its whole lifetime."""

    transport: httpx.AsyncBaseTransport
    secure: bool
    keep_alive: bool
    limits: httpx.Limits = field(default_factory=httpx.Limits)
    proxy: ProxyTarget | None = None
    proxy_url: str | None = None

    @property
    def proxied(self) -> bool:
        return self.proxy is not None


def is_excluded(dsn: Dsn, exclusions: list[str]) -> bool:
    """True when the target host, or host:port, appears in the no-proxy list."""
    hostname = dsn.hostname.lower()
    with_port = f"{dsn.host.lower()}:{dsn.resolved_port}"
    return any(entry == hostname or entry == with_port for entry in exclusions)


def ssl_context(ca_cert: bytes | None) -> ssl.SSLContext | bool:
    if not ca_cert:
        return True
    if b"-----BEGIN" in ca_cert:
        return ssl.create_default_context(cadata=ca_cert.decode("ascii"))
    return ssl.create_default_context(cadata=ca_cert)


def select_agent(
    dsn: Dsn,
    *,
    proxy_url: str | None = None,
    environ: ProxyEnvironment | None = None,
    ca_cert: bytes | None = None,
    keep_alive: bool = False,
    logger: BoundLogger | None = None,
) -> Agent:
    log = (logger or create_logger()).child("agent")
    env = environ if environ is not None else ProxyEnvironment.from_environ()

    effective = proxy_url or env.proxy_for(dsn.scheme)
    if effective and is_excluded(dsn, env.exclusions()):
        log.debug("Host %s matches no_proxy, bypassing %s", dsn.netloc, effective)
        effective = None

    # keep-alive off means no idle pooled connections are retained
    limits = httpx.Limits(max_connections=100, max_keepalive_connections=20 if keep_alive else 0)
    verify = ssl_context(ca_cert) if dsn.secure else True

    if effective:
        if "://" not in effective:
            effective = f"http://{effective}"
        target = ProxyTarget.from_url(effective)
        log.info("Routing %s through proxy %s", dsn.netloc, target.url)
        transport = httpx.AsyncHTTPTransport(
            proxy=httpx.Proxy(effective),
            verify=verify,
            limits=limits,
        )
        return Agent(
            transport=transport,
            secure=dsn.secure,
            keep_alive=keep_alive,
            limits=limits,
            proxy=target,
            proxy_url=effective,
        )

    log.info("Connecting directly to %s (%s)", dsn.netloc, dsn.scheme)
    transport = httpx.AsyncHTTPTransport(verify=verify, limits=limits)
    return Agent(transport=transport, secure=dsn.secure, keep_alive=keep_alive, limits=limits)


__all__ = ["Agent", "ProxyEnvironment", "ProxyTarget", "is_excluded", "select_agent", "ssl_context"]
