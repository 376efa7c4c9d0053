"""Common transport abstractions."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Protocol, Union, runtime_checkable

from ..logger import LogLevel
from ..ratelimit import Clock

if TYPE_CHECKING:
    from .agent import ProxyEnvironment

Payload = Union[bytes, str]


@dataclass
class TransportResponse:
    status: int
    body: bytes
    headers: Mapping[str, str]

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@dataclass(frozen=True)
class TransportOptions:
    """Construction-time configuration; never mutated afterwards."""

    dsn: str
    headers: Mapping[str, str] = field(default_factory=dict)
    proxy_url: str | None = None
    ca_cert: bytes | None = None
    keep_alive: bool = False
    client_name: str | None = None
    client_version: str | None = None
    environ: ProxyEnvironment | None = None
    clock: Clock = time.time
    logger: object | None = None
    log_level: LogLevel = "info"

    def __post_init__(self) -> None:
        # read-only snapshot of the caller's headers
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@runtime_checkable
class Transport(Protocol):
    async def send(self, payload: Payload, headers: Mapping[str, str] | None = None) -> None: ...

    async def aclose(self) -> None: ...


__all__ = ["Payload", "Transport", "TransportOptions", "TransportResponse"]
