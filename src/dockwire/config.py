"""Connection configuration for reaching a Docker daemon."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Mapping
from urllib.parse import urlparse

from .errors import ConfigError

ConnectionKind = Literal["unix", "tcp"]

DEFAULT_DOCKER_HOST = "unix:///var/run/docker.sock"
DEFAULT_TLS_PORT = 2376
DEFAULT_PLAIN_PORT = 2375


@dataclass(frozen=True)
class TlsMaterial:
    """Paths to user supplied TLS files. Every field is optional."""

    ca_cert: str | None = None
    client_cert: str | None = None
    client_key: str | None = None

    @property
    def has_client_identity(self) -> bool:
        return bool(self.client_cert or self.client_key)

    @classmethod
    def from_cert_path(cls, directory: str | os.PathLike[str]) -> "TlsMaterial":
        """Load the ``ca.pem``/``cert.pem``/``key.pem`` layout used by the docker CLI.

        Missing files are left unset so that the TLS builder can report an
        incomplete client identity instead of failing on a path lookup.
        """
        base = Path(directory).expanduser()

        def existing(name: str) -> str | None:
            candidate = base / name
            return str(candidate) if candidate.is_file() else None

        return cls(
            ca_cert=existing("ca.pem"),
            client_cert=existing("cert.pem"),
            client_key=existing("key.pem"),
        )


@dataclass(frozen=True)
class ConnectionConfig:
    """Either a local socket path or a remote host, never both."""

    socket_path: str | None = None
    host: str | None = None
    port: int | None = None
    tls: TlsMaterial | None = None

    @property
    def kind(self) -> ConnectionKind:
        return "unix" if self.socket_path is not None else "tcp"

    @property
    def uses_tls(self) -> bool:
        return self.tls is not None

    @classmethod
    def local(cls, path: str | os.PathLike[str]) -> "ConnectionConfig":
        return cls(socket_path=os.fspath(path))

    @classmethod
    def remote(cls, host: str, port: int | None = None, tls: TlsMaterial | None = None) -> "ConnectionConfig":
        if port is None:
            port = DEFAULT_TLS_PORT if tls is not None else DEFAULT_PLAIN_PORT
        return cls(host=host, port=port, tls=tls)

    @classmethod
    def from_url(cls, url: str, tls: TlsMaterial | None = None) -> "ConnectionConfig":
        """Parse ``unix://``, ``tcp://``, ``http://`` and ``https://`` addresses."""
        parsed = urlparse(url)
        scheme = parsed.scheme.lower()

        if scheme == "unix":
            path = (parsed.netloc + parsed.path) or None
            if not path:
                raise ConfigError(f"Missing socket path in {url!r}", context=url)
            if tls is not None:
                raise ConfigError("TLS material cannot be used with a unix socket", context=url)
            return cls.local(path)

        if scheme in {"tcp", "http", "https"}:
            if not parsed.hostname:
                raise ConfigError(f"Missing host in {url!r}", context=url)
            if scheme == "https" and tls is None:
                tls = TlsMaterial()
            if scheme == "http" and tls is not None:
                raise ConfigError("TLS material cannot be used with an http:// address", context=url)
            try:
                port = parsed.port
            except ValueError as exc:
                raise ConfigError(f"Invalid port in {url!r}", context=url) from exc
            return cls.remote(parsed.hostname, port, tls)

        raise ConfigError(f"Unsupported scheme: {scheme or url!r}", context=url)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ConnectionConfig":
        """Interpret ``DOCKER_HOST``, ``DOCKER_TLS_VERIFY`` and ``DOCKER_CERT_PATH``."""
        env = os.environ if environ is None else environ
        host = env.get("DOCKER_HOST") or DEFAULT_DOCKER_HOST
        tls = None
        if env.get("DOCKER_TLS_VERIFY") and not host.startswith("unix://"):
            tls = TlsMaterial.from_cert_path(default_cert_path(env))
        return cls.from_url(host, tls=tls)


def default_cert_path(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    from_env = env.get("DOCKER_CERT_PATH") or env.get("DOCKER_CONFIG")
    if from_env:
        return Path(from_env)
    return Path.home() / ".docker"


__all__ = [
    "ConnectionConfig",
    "ConnectionKind",
    "DEFAULT_DOCKER_HOST",
    "TlsMaterial",
    "default_cert_path",
]
