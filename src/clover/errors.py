"""Application-level exception types for Clover."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


class CloverError(Exception):
    """Base exception for Clover."""


class ExtractionError(CloverError):
    """Raised when the launch URL is malformed or carries no auth payload."""


class AuthError(CloverError):
    """Raised when the auth payload cannot be exchanged for a session token."""


class TransportError(CloverError):
    """Raised when an HTTP call fails, times out or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.body = body
        self.headers = dict(headers) if headers is not None else None


class PayloadError(CloverError):
    """Raised when a remote response lacks an expected field."""


class RunInterrupted(CloverError):
    """Raised when a run is abandoned because the stop event was set."""
