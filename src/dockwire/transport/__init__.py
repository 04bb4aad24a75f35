"""Transport implementations exposed to users."""

from .base import Transport, TransportKind
from .selector import select_transport
from .tcp import TcpTransport
from .unix import UnixSocketTransport

__all__ = [
    "TcpTransport",
    "Transport",
    "TransportKind",
    "UnixSocketTransport",
    "select_transport",
]
