"""Public surface for the dockwire Docker Engine client."""

from .client import DockerClient
from .config import ConnectionConfig, TlsMaterial
from .dispatcher import HttpDispatcher, StreamingBody
from .errors import (
    ApiError,
    ConfigError,
    ConnectError,
    DecodeError,
    DockerError,
    FramingError,
    HandshakeError,
    NotFoundError,
    TlsConfigError,
    TransportError,
)
from .stream import COMPACT_HEADER, DOCKER_HEADER, FrameDecoder, decode_frames, demultiplex, iter_json_lines
from .tls import build_ssl_context
from .transport import TcpTransport, Transport, UnixSocketTransport, select_transport
from .types import MultiplexedFrame, Process, Request, Response, StreamSelector
from .version import __version__

__all__ = [
    "__version__",
    "ApiError",
    "COMPACT_HEADER",
    "ConfigError",
    "ConnectError",
    "ConnectionConfig",
    "DOCKER_HEADER",
    "DecodeError",
    "DockerClient",
    "DockerError",
    "FrameDecoder",
    "FramingError",
    "HandshakeError",
    "HttpDispatcher",
    "MultiplexedFrame",
    "NotFoundError",
    "Process",
    "Request",
    "Response",
    "StreamSelector",
    "StreamingBody",
    "TcpTransport",
    "TlsConfigError",
    "TlsMaterial",
    "Transport",
    "TransportError",
    "UnixSocketTransport",
    "build_ssl_context",
    "decode_frames",
    "demultiplex",
    "iter_json_lines",
    "select_transport",
]
