from __future__ import annotations

import asyncio
import contextlib
import json
import shutil
import ssl
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import AsyncIterator, Callable
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
import trustme

from dockwire import TlsMaterial


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: dict[str, list[str]]
    headers: dict[str, str]
    body: bytes

    def json(self):
        return json.loads(self.body)


@dataclass
class Reply:
    status: int = 200
    body: bytes = b""
    content_type: str = "application/json"
    chunks: list[bytes] | None = None


Handler = Callable[[RecordedRequest], Reply]

REASONS = {200: "OK", 204: "No Content", 400: "Bad Request", 404: "Not Found", 409: "Conflict", 500: "Internal Server Error"}


@dataclass
class FakeDaemon:
    """Minimal HTTP/1.1 server standing in for dockerd."""

    routes: dict[tuple[str, str], Handler] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)
    writers: list[asyncio.StreamWriter] = field(default_factory=list)

    def route(self, method: str, path: str, reply: Reply | Handler) -> None:
        handler = reply if callable(reply) else (lambda _request, reply=reply: reply)
        self.routes[(method, path)] = handler

    def json_route(self, method: str, path: str, payload, status: int = 200) -> None:
        self.route(method, path, Reply(status=status, body=json.dumps(payload).encode()))

    async def handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self.writers.append(writer)
        try:
            while True:
                try:
                    head = await reader.readuntil(b"\r\n\r\n")
                except (asyncio.IncompleteReadError, ConnectionError):
                    return
                request_line, *header_lines = head.decode("latin-1").split("\r\n")
                method, target, _ = request_line.split(" ", 2)
                headers = {}
                for line in header_lines:
                    if ":" in line:
                        name, value = line.split(":", 1)
                        headers[name.strip().lower()] = value.strip()
                length = int(headers.get("content-length", "0"))
                body = await reader.readexactly(length) if length else b""
                parts = urlsplit(target)
                request = RecordedRequest(method, parts.path, parse_qs(parts.query), headers, body)
                self.requests.append(request)

                handler = self.routes.get((method, parts.path))
                if handler is None:
                    reply = Reply(status=404, body=b'{"message":"page not found"}')
                else:
                    reply = handler(request)
                try:
                    await self._write_reply(writer, reply)
                except ConnectionError:
                    # client hung up mid-stream
                    return
        finally:
            writer.close()

    async def _write_reply(self, writer: asyncio.StreamWriter, reply: Reply) -> None:
        status_line = f"HTTP/1.1 {reply.status} {REASONS.get(reply.status, 'Unknown')}\r\n"
        if reply.chunks is None:
            head = (
                f"{status_line}Content-Type: {reply.content_type}\r\n"
                f"Content-Length: {len(reply.body)}\r\n\r\n"
            )
            writer.write(head.encode("latin-1") + reply.body)
            await writer.drain()
            return

        head = f"{status_line}Content-Type: {reply.content_type}\r\nTransfer-Encoding: chunked\r\n\r\n"
        writer.write(head.encode("latin-1"))
        await writer.drain()
        for chunk in reply.chunks:
            writer.write(f"{len(chunk):x}\r\n".encode("latin-1") + chunk + b"\r\n")
            await writer.drain()
            await asyncio.sleep(0)
        writer.write(b"0\r\n\r\n")
        await writer.drain()

    @contextlib.asynccontextmanager
    async def serve_unix(self, path: str) -> AsyncIterator[str]:
        server = await asyncio.start_unix_server(self.handle, path=path)
        try:
            yield path
        finally:
            await self._shutdown(server)

    @contextlib.asynccontextmanager
    async def serve_tcp(self, ssl_context: ssl.SSLContext | None = None) -> AsyncIterator[int]:
        server = await asyncio.start_server(self.handle, host="127.0.0.1", port=0, ssl=ssl_context)
        try:
            yield server.sockets[0].getsockname()[1]
        finally:
            await self._shutdown(server)

    async def _shutdown(self, server: asyncio.AbstractServer) -> None:
        server.close()
        for writer in self.writers:
            writer.close()
        await server.wait_closed()


@pytest.fixture
def daemon() -> FakeDaemon:
    return FakeDaemon()


@pytest.fixture
def socket_path():
    # AF_UNIX paths are length limited, so stay out of pytest's deep tmp dirs
    directory = tempfile.mkdtemp(prefix="dw")
    try:
        yield str(Path(directory) / "docker.sock")
    finally:
        shutil.rmtree(directory, ignore_errors=True)


class DummyTransport:
    """Transport whose connections are served by an in-process handler."""

    kind = "tcp"
    base_url = "http://docker.test"

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._handler = handler

    def open(self) -> httpx.AsyncBaseTransport:
        return httpx.MockTransport(self._handler)


@pytest.fixture
def dummy_transport_factory():
    return DummyTransport


@dataclass
class Pki:
    """A throwaway CA with a server certificate for 127.0.0.1 and client identities on disk."""

    ca: trustme.CA
    directory: Path

    def server_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        context.verify_mode = ssl.CERT_REQUIRED
        self.ca.issue_cert("127.0.0.1").configure_cert(context)
        self.ca.configure_trust(context)
        return context

    def write_identity(self, name: str) -> tuple[str, str]:
        leaf = self.ca.issue_cert(f"{name}.dockwire.test")
        cert = self.directory / f"{name}-cert.pem"
        key = self.directory / f"{name}-key.pem"
        leaf.cert_chain_pems[0].write_to_path(str(cert))
        leaf.private_key_pem.write_to_path(str(key))
        return str(cert), str(key)

    def material(self, *, identity: bool = True) -> TlsMaterial:
        ca_cert = self.directory / "ca.pem"
        self.ca.cert_pem.write_to_path(str(ca_cert))
        if not identity:
            return TlsMaterial(ca_cert=str(ca_cert))
        cert, key = self.write_identity("client")
        return TlsMaterial(ca_cert=str(ca_cert), client_cert=cert, client_key=key)


@pytest.fixture
def pki(tmp_path) -> Pki:
    return Pki(trustme.CA(), tmp_path)
