"""Pick and build the transport described by a connection config."""

from __future__ import annotations

from ..config import ConnectionConfig
from ..errors import ConfigError
from ..logger import BoundLogger, create_logger
from ..tls import build_ssl_context
from .base import Transport
from .tcp import TcpTransport
from .unix import UnixSocketTransport


def select_transport(config: ConnectionConfig, *, logger: BoundLogger | None = None) -> Transport:
    """Validate ``config`` and construct its transport without any network I/O.

    The socket path is deliberately not checked here; a socket created after
    the client still works.
    """
    base = logger or create_logger()
    log = base.child("transport")
    has_remote = config.host is not None or config.port is not None

    if config.socket_path is not None:
        if config.tls is not None:
            raise ConfigError("A unix socket config cannot carry TLS material", context=config)
        if has_remote:
            raise ConfigError("A config cannot name both a socket path and a remote host", context=config)
        if not config.socket_path:
            raise ConfigError("Socket path is empty", context=config)
        log.info("Selected unix socket transport at %s", config.socket_path)
        return UnixSocketTransport(config.socket_path, logger=log)

    if not config.host:
        raise ConfigError("A config needs either a socket path or a remote host", context=config)
    if config.port is None or not 0 < config.port < 65536:
        raise ConfigError(f"Invalid port: {config.port!r}", context=config)

    ssl_context = None
    if config.tls is not None:
        ssl_context = build_ssl_context(config.tls, logger=base)
    log.info(
        "Selected %s transport to %s:%s",
        "tls" if ssl_context is not None else "tcp",
        config.host,
        config.port,
    )
    return TcpTransport(config.host, config.port, ssl_context=ssl_context, logger=log)


__all__ = ["select_transport"]
