"""Public surface for the rate-aware event transport."""

from .dsn import Dsn, parse_dsn
from .errors import (
    HttpError,
    InvalidConnectionStringError,
    NetworkError,
    RateLimitedError,
    TransportError,
)
from .transport import HttpTransport, ProxyEnvironment, Transport, TransportOptions
from .types import SendResult
from .version import __version__

__all__ = [
    "__version__",
    "Dsn",
    "HttpError",
    "HttpTransport",
    "InvalidConnectionStringError",
    "NetworkError",
    "ProxyEnvironment",
    "RateLimitedError",
    "SendResult",
    "Transport",
    "TransportError",
    "TransportOptions",
    "parse_dsn",
]
