"""Unix domain socket transport."""

from __future__ import annotations

import httpx

from ..logger import BoundLogger, create_logger
from .base import Transport


class UnixSocketTransport:
    kind: Transport.Kind = "unix"

    def __init__(self, path: str, *, logger: BoundLogger | None = None) -> None:
        self._path = path
        self._logger = (logger or create_logger()).child("unix")

    @property
    def path(self) -> str:
        return self._path

    @property
    def base_url(self) -> str:
        # The host is ignored by the daemon; the socket is the channel
        return "http://localhost"

    def open(self) -> httpx.AsyncBaseTransport:
        self._logger.debug("Using unix socket %s", self._path)
        return httpx.AsyncHTTPTransport(uds=self._path, retries=0)

    def __repr__(self) -> str:
        return f"UnixSocketTransport({self._path!r})"


__all__ = ["UnixSocketTransport"]
