"""Decoders for the daemon's streaming bodies.

Endpoints such as ``logs`` and ``attach`` interleave stdout and stderr in one
byte stream. Each frame starts with a fixed-size header carrying a one byte
stream selector and a big-endian 32 bit payload length, followed by exactly
that many payload bytes. The Engine pads the selector with three zero bytes
(``DOCKER_HEADER``); ``COMPACT_HEADER`` describes the unpadded layout.

Decoding is byte oriented: frame boundaries never depend on how the transport
happened to chunk the body. A stream that ends inside a header or payload is a
``FramingError`` and is never resynchronised.
"""

from __future__ import annotations

import struct
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Iterator

from .errors import FramingError
from .parser import decode_json
from .types import MultiplexedFrame, StreamSelector

DOCKER_HEADER = struct.Struct(">BxxxL")
COMPACT_HEADER = struct.Struct(">BL")

MULTIPLEXED_CONTENT_TYPE = "application/vnd.docker.multiplexed-stream"
RAW_CONTENT_TYPE = "application/vnd.docker.raw-stream"


def is_multiplexed(content_type: str | None) -> bool:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type == MULTIPLEXED_CONTENT_TYPE


def is_raw_stream(content_type: str | None) -> bool:
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    return media_type == RAW_CONTENT_TYPE


class FrameDecoder:
    """Incremental parser turning arbitrary byte chunks into frames."""

    def __init__(self, header: struct.Struct = DOCKER_HEADER) -> None:
        self._header = header
        self._buffer = bytearray()
        self._pending: tuple[StreamSelector, int] | None = None

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    def feed(self, data: bytes) -> list[MultiplexedFrame]:
        self._buffer += data
        frames: list[MultiplexedFrame] = []
        while True:
            if self._pending is None:
                if len(self._buffer) < self._header.size:
                    break
                raw_selector, length = self._header.unpack_from(self._buffer)
                self._pending = (_selector(raw_selector), length)
                del self._buffer[: self._header.size]

            selector, length = self._pending
            if len(self._buffer) < length:
                break
            payload = bytes(self._buffer[:length])
            del self._buffer[:length]
            self._pending = None
            frames.append(MultiplexedFrame(selector, payload))
        return frames

    def close(self) -> None:
        """Signal end of input; leftover bytes mean the stream was cut short."""
        if self._pending is not None:
            selector, length = self._pending
            raise FramingError(
                f"Stream ended inside a {selector.name.lower()} frame: "
                f"expected {length} payload bytes, got {len(self._buffer)}",
                context={"selector": selector, "expected": length, "received": len(self._buffer)},
            )
        if self._buffer:
            raise FramingError(
                f"Stream ended inside a frame header: expected {self._header.size} bytes, got {len(self._buffer)}",
                context={"expected": self._header.size, "received": len(self._buffer)},
            )


def decode_frames(
    chunks: Iterable[bytes],
    *,
    header: struct.Struct = DOCKER_HEADER,
) -> Iterator[MultiplexedFrame]:
    decoder = FrameDecoder(header)
    for chunk in chunks:
        yield from decoder.feed(chunk)
    decoder.close()


async def demultiplex(
    chunks: AsyncIterable[bytes],
    *,
    header: struct.Struct = DOCKER_HEADER,
) -> AsyncIterator[MultiplexedFrame]:
    """Lazily decode frames from a streaming body.

    Closing the returned generator closes ``chunks`` too when it supports
    ``aclose``, which releases the daemon connection.
    """
    decoder = FrameDecoder(header)
    try:
        async for chunk in chunks:
            for frame in decoder.feed(chunk):
                yield frame
        decoder.close()
    finally:
        await _aclose(chunks)


async def passthrough(
    chunks: AsyncIterable[bytes],
    selector: StreamSelector = StreamSelector.STDOUT,
) -> AsyncIterator[MultiplexedFrame]:
    """Wrap an unframed (TTY) stream so callers see one frame per chunk."""
    try:
        async for chunk in chunks:
            if chunk:
                yield MultiplexedFrame(selector, chunk)
    finally:
        await _aclose(chunks)


async def iter_json_lines(chunks: AsyncIterable[bytes]) -> AsyncIterator[Any]:
    """Decode a newline-delimited JSON stream such as ``/events``."""
    buffer = bytearray()
    try:
        async for chunk in chunks:
            buffer += chunk
            while True:
                index = buffer.find(b"\n")
                if index < 0:
                    break
                line = bytes(buffer[:index])
                del buffer[: index + 1]
                if line.strip():
                    yield decode_json(line)
        if buffer.strip():
            yield decode_json(bytes(buffer))
    finally:
        await _aclose(chunks)


def _selector(value: int) -> StreamSelector:
    try:
        return StreamSelector(value)
    except ValueError as exc:
        raise FramingError(f"Unknown stream selector {value}", context={"selector": value}) from exc


async def _aclose(chunks: Any) -> None:
    aclose = getattr(chunks, "aclose", None)
    if aclose is not None:
        await aclose()


__all__ = [
    "COMPACT_HEADER",
    "DOCKER_HEADER",
    "FrameDecoder",
    "MULTIPLEXED_CONTENT_TYPE",
    "RAW_CONTENT_TYPE",
    "decode_frames",
    "demultiplex",
    "is_multiplexed",
    "is_raw_stream",
    "iter_json_lines",
    "passthrough",
]
