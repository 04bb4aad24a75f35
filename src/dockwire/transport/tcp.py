"""TCP transport, plaintext or TLS."""

from __future__ import annotations

import ssl

import httpx

from ..logger import BoundLogger, create_logger
from .base import Transport


class TcpTransport:
    kind: Transport.Kind = "tcp"

    def __init__(
        self,
        host: str,
        port: int,
        *,
        ssl_context: ssl.SSLContext | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._ssl_context = ssl_context
        self._logger = (logger or create_logger()).child("tcp")

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def uses_tls(self) -> bool:
        return self._ssl_context is not None

    @property
    def base_url(self) -> str:
        scheme = "https" if self.uses_tls else "http"
        host = f"[{self._host}]" if ":" in self._host else self._host
        return f"{scheme}://{host}:{self._port}"

    def open(self) -> httpx.AsyncBaseTransport:
        self._logger.debug("Using %s at %s:%s", "tls" if self.uses_tls else "tcp", self._host, self._port)
        verify: ssl.SSLContext | bool = self._ssl_context if self._ssl_context is not None else True
        return httpx.AsyncHTTPTransport(verify=verify, retries=0)

    def __repr__(self) -> str:
        return f"TcpTransport({self._host!r}, {self._port}, tls={self.uses_tls})"


__all__ = ["TcpTransport"]
