"""Rate-aware HTTP transport built on top of httpx."""

from __future__ import annotations

import time
from dataclasses import fields
from typing import Mapping

import httpx

from ..auth import DEFAULT_CLIENT_NAME, AuthManager, client_identifier
from ..dsn import Dsn, parse_dsn
from ..errors import HttpError, NetworkError, RateLimitedError, TransportError, format_timestamp
from ..logger import LogLevel, create_logger
from ..ratelimit import Clock, Lockout, lockout_deadline
from ..types import SendResult
from ..version import __version__
from .agent import Agent, ProxyEnvironment, select_agent
from .base import Payload, TransportOptions, TransportResponse


class HttpTransport:
    """Delivers one payload per ``send`` call to the store endpoint of a connection string.

    Sends are refused locally while the server-imposed lockout window is open.
    The connection agent is chosen once, here, from the proxy configuration and
    a snapshot of the proxy environment. When a ``client`` is injected it carries
    the requests instead, and the agent is kept for inspection only; its unused
    connection pool is released by ``aclose``.
    """

    def __init__(
        self,
        dsn: str,
        *,
        headers: Mapping[str, str] | None = None,
        proxy_url: str | None = None,
        ca_cert: bytes | None = None,
        keep_alive: bool = False,
        client_name: str | None = None,
        client_version: str | None = None,
        environ: ProxyEnvironment | None = None,
        clock: Clock = time.time,
        client: httpx.AsyncClient | None = None,
        logger: object | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        options = TransportOptions(
            dsn=dsn,
            headers=dict(headers or {}),
            proxy_url=proxy_url,
            ca_cert=ca_cert,
            keep_alive=keep_alive,
            client_name=client_name,
            client_version=client_version,
            environ=environ if environ is not None else ProxyEnvironment.from_environ(),
            clock=clock,
            logger=logger,
            log_level=log_level,
        )
        self.options = options
        root_logger = create_logger(logger=options.logger, level=options.log_level)
        self._logger = root_logger.child("http")
        self.dsn: Dsn = parse_dsn(options.dsn)
        self._auth = AuthManager(
            self.dsn,
            client_identifier(
                options.client_name or DEFAULT_CLIENT_NAME,
                options.client_version or __version__,
            ),
        )
        self._lockout = Lockout(options.clock)
        self.agent: Agent = select_agent(
            self.dsn,
            proxy_url=options.proxy_url,
            environ=options.environ,
            ca_cert=options.ca_cert,
            keep_alive=options.keep_alive,
            logger=root_logger,
        )
        self._client = client or httpx.AsyncClient(transport=self.agent.transport, trust_env=False)
        self._owns_client = client is None

    @classmethod
    def from_options(cls, options: TransportOptions, *, client: httpx.AsyncClient | None = None) -> "HttpTransport":
        kwargs = {f.name: getattr(options, f.name) for f in fields(options) if f.name != "dsn"}
        return cls(options.dsn, client=client, **kwargs)

    @property
    def disabled_until(self) -> float | None:
        return self._lockout.disabled_until

    def is_rate_limited(self) -> bool:
        return self._lockout.is_active()

    async def send(self, payload: Payload, headers: Mapping[str, str] | None = None) -> None:
        until = self._lockout.active_until()
        if until is not None:
            self._logger.debug("Dropping send, transport locked till %s", format_timestamp(until))
            raise RateLimitedError(until)

        request_headers = self._auth.add_http_headers(self._lockout.now(), self.options.headers, headers)
        body = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload)
        url = self.dsn.store_url

        try:
            self._logger.debug("HTTP POST %s bytes=%d", url, len(body))
            response = await self._client.post(url, content=body, headers=request_headers)
        except httpx.TransportError as exc:
            self._logger.warn("HTTP POST %s failed: %s", url, exc)
            raise NetworkError(exc) from exc

        self._logger.debug("HTTP <- %s status=%s", url, response.status_code)
        self._handle_response(
            TransportResponse(
                status=response.status_code,
                body=response.content,
                headers={k.lower(): v for k, v in response.headers.items()},
            )
        )

    async def send_safe(self, payload: Payload, headers: Mapping[str, str] | None = None) -> SendResult:
        try:
            await self.send(payload, headers)
            return SendResult(ok=True)
        except TransportError as exc:
            return SendResult(ok=False, error=exc)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
        else:
            await self.agent.transport.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _handle_response(self, response: TransportResponse) -> None:
        if response.ok:
            return

        deadline = lockout_deadline(response.status, response.headers, self._lockout.now())
        if self._lockout.update(deadline):
            assert deadline is not None
            self._logger.warn(
                "Server returned %s, locking transport till %s",
                response.status,
                format_timestamp(deadline),
            )
        raise HttpError(response.status, response.headers.get("x-sentry-error"))


__all__ = ["HttpTransport"]
