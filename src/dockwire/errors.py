"""Exceptions raised by the dockwire client."""

from __future__ import annotations

from typing import Any


class DockerError(Exception):
    """Base error for all client failures."""

    def __init__(self, message: str, *, context: Any | None = None) -> None:
        super().__init__(message)
        self.context = context


class ConfigError(DockerError):
    """Raised when a connection configuration is self-contradictory."""


class TlsConfigError(DockerError):
    """Raised when TLS material is missing, unreadable or inconsistent."""


class TransportError(DockerError):
    """Raised when the byte channel to the daemon fails."""


class ConnectError(TransportError):
    """Raised when the socket or host cannot be reached."""


class HandshakeError(TransportError):
    """Raised when TLS negotiation or certificate validation fails."""


class ApiError(DockerError):
    """Raised when the daemon answers with a 4xx or 5xx status."""

    def __init__(
        self,
        status: int,
        message: str,
        *,
        body: bytes = b"",
        context: Any | None = None,
    ) -> None:
        super().__init__(f"Docker API error {status}: {message}", context=context)
        self.status = status
        self.message = message
        self.body = body


class NotFoundError(ApiError):
    """Raised for 404 responses."""


class FramingError(DockerError):
    """Raised when a multiplexed stream is truncated or malformed."""


class DecodeError(DockerError):
    """Raised when a body expected to be JSON cannot be decoded."""


__all__ = [
    "ApiError",
    "ConfigError",
    "ConnectError",
    "DecodeError",
    "DockerError",
    "FramingError",
    "HandshakeError",
    "NotFoundError",
    "TlsConfigError",
    "TransportError",
]
