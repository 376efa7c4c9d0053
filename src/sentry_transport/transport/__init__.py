"""Transport implementations exposed to users."""

from .agent import Agent, ProxyEnvironment, ProxyTarget, select_agent
from .base import Payload, Transport, TransportOptions, TransportResponse
from .http import HttpTransport

__all__ = [
    "Agent",
    "HttpTransport",
    "Payload",
    "ProxyEnvironment",
    "ProxyTarget",
    "Transport",
    "TransportOptions",
    "TransportResponse",
    "select_agent",
]
