"""Shared typing helpers."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import TransportError


@dataclass
class SendResult:
    ok: bool
    error: TransportError | None = None


__all__ = ["SendResult"]
