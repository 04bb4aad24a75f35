"""Request, response and frame types passed between components."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from .errors import DecodeError
from .parser import decode_json

if TYPE_CHECKING:
    from .dispatcher import StreamingBody


@dataclass(frozen=True)
class Request:
    method: str
    path: str
    body: Any | None = None
    params: Mapping[str, Any] | None = None
    headers: Mapping[str, str] | None = None
    stream: bool = False


@dataclass
class Response:
    """A daemon reply holding either a buffered ``body`` or a lazy ``stream``."""

    status: int
    headers: Mapping[str, str]
    body: bytes | None = None
    stream: StreamingBody | None = None

    def __post_init__(self) -> None:
        if self.body is not None and self.stream is not None:
            raise ValueError("A response carries a body or a stream, not both")

    @property
    def content_type(self) -> str:
        return (self.headers.get("content-type", "") or "").lower()

    def json(self) -> Any:
        if self.body is None:
            raise TypeError("Streaming responses have no buffered body")
        return decode_json(self.body)


class StreamSelector(enum.IntEnum):
    STDIN = 0
    STDOUT = 1
    STDERR = 2


@dataclass(frozen=True)
class MultiplexedFrame:
    selector: StreamSelector
    payload: bytes = field(repr=False)

    @property
    def length(self) -> int:
        return len(self.payload)

    def text(self, encoding: str = "utf-8") -> str:
        return self.payload.decode(encoding, errors="replace")


# ps column titles differ between `ps -ef` and `ps aux`; both land on the same field
PROCESS_COLUMNS = {
    "UID": "user",
    "USER": "user",
    "PID": "pid",
    "%CPU": "cpu",
    "%MEM": "memory",
    "VSZ": "vsz",
    "RSS": "rss",
    "TTY": "tty",
    "STAT": "stat",
    "START": "start",
    "STIME": "start",
    "TIME": "time",
    "CMD": "command",
    "COMMAND": "command",
}


@dataclass(frozen=True)
class Process:
    """One row of a container's ``ps`` table. Columns ``ps`` did not print are ``None``."""

    user: str = ""
    pid: str = ""
    command: str = ""
    cpu: str | None = None
    memory: str | None = None
    vsz: str | None = None
    rss: str | None = None
    tty: str | None = None
    stat: str | None = None
    start: str | None = None
    time: str | None = None

    @classmethod
    def from_row(cls, titles: Sequence[str], row: Sequence[str]) -> "Process":
        values = {}
        for title, value in zip(titles, row):
            name = PROCESS_COLUMNS.get(title)
            if name is not None:
                values[name] = value
        return cls(**values)

    @classmethod
    def from_top(cls, top: Any) -> list["Process"]:
        """Turn a ``/containers/{id}/top`` reply into one record per process."""
        if not isinstance(top, Mapping):
            raise DecodeError("Process listing is not an object", context=top)
        titles = top.get("Titles")
        rows = top.get("Processes") or []
        if not isinstance(titles, list) or not isinstance(rows, list):
            raise DecodeError("Process listing lacks Titles or Processes", context=top)
        return [cls.from_row(titles, row) for row in rows]


__all__ = ["MultiplexedFrame", "PROCESS_COLUMNS", "Process", "Request", "Response", "StreamSelector"]
