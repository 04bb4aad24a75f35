"""Common transport abstractions."""

from __future__ import annotations

from typing import Literal, Protocol, runtime_checkable

import httpx

TransportKind = Literal["unix", "tcp"]


@runtime_checkable
class Transport(Protocol):
    """Something that can hand the dispatcher connected byte channels.

    ``open`` returns an httpx transport; connections are established lazily on
    the first request, never during ``open`` itself.
    """

    Kind = TransportKind

    @property
    def kind(self) -> TransportKind: ...

    @property
    def base_url(self) -> str: ...

    def open(self) -> httpx.AsyncBaseTransport: ...


__all__ = ["Transport", "TransportKind"]
