"""Send requests to the daemon over whichever transport was selected."""

from __future__ import annotations

import ssl
from types import TracebackType
from typing import Mapping

import httpx

from .errors import ApiError, ConfigError, ConnectError, HandshakeError, NotFoundError, TransportError
from .logger import BoundLogger, create_logger
from .parser import encode_json, encode_params, extract_error_message
from .transport.base import Transport
from .types import Request, Response

USER_AGENT = "dockwire"


class StreamingBody:
    """Forward-only async iterator over the chunks of a streaming response.

    Iterating to the end, hitting an error or calling ``aclose`` releases the
    connection. Bytes already yielded are never delivered again, and a closed
    body simply stops iterating.
    """

    def __init__(self, response: httpx.Response, *, logger: BoundLogger | None = None) -> None:
        self._response = response
        self._logger = logger or create_logger()
        self._chunks = None
        self._closed = False
        self._received = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def received(self) -> int:
        return self._received

    def __aiter__(self) -> "StreamingBody":
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        if self._chunks is None:
            self._chunks = self._response.aiter_raw()
        while True:
            try:
                chunk = await self._chunks.__anext__()
            except StopAsyncIteration:
                await self.aclose()
                raise
            except (httpx.HTTPError, ssl.SSLError) as exc:
                await self.aclose()
                raise map_transport_error(exc, str(self._response.url)) from exc
            if chunk:
                self._received += len(chunk)
                return chunk

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._chunks is not None:
            await self._chunks.aclose()
        await self._response.aclose()
        self._logger.trace("Stream %s closed after %d bytes", self._response.url.path, self._received)

    async def __aenter__(self) -> "StreamingBody":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class HttpDispatcher:
    """Issues ``Request`` objects and returns ``Response`` objects.

    The dispatcher owns one httpx client built from the transport, so
    connections are pooled per transport and never shared across TLS
    identities. There is no timeout and no retry; callers layer those on top.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        logger: BoundLogger | None = None,
        default_headers: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._transport = transport
        self._logger = (logger or create_logger()).child("dispatcher")
        self._default_headers = {"User-Agent": USER_AGENT, **dict(default_headers or {})}
        self._client = client or httpx.AsyncClient(
            transport=transport.open(),
            base_url=transport.base_url,
            timeout=None,
            trust_env=False,
        )
        self._owns_client = client is None

    @property
    def transport(self) -> Transport:
        return self._transport

    async def send(self, request: Request) -> Response:
        headers = dict(self._default_headers)
        headers.update(request.headers or {})
        content = None
        if request.body is not None:
            content = encode_json(request.body)
            headers["Content-Type"] = "application/json"

        try:
            http_request = self._client.build_request(
                request.method.upper(),
                request.path,
                params=encode_params(dict(request.params or {})),
                headers=headers,
                content=content,
            )
        except (httpx.InvalidURL, UnicodeEncodeError) as exc:
            raise ConfigError(f"Cannot build {request.method} {request.path!r}: {exc}", context=request) from exc
        self._logger.debug(
            "%s %s bytes=%d stream=%s",
            http_request.method,
            http_request.url.path,
            len(content or b""),
            request.stream,
        )
        try:
            response = await self._client.send(http_request, stream=True)
        except (httpx.HTTPError, ssl.SSLError) as exc:
            raise map_transport_error(
                exc,
                f"{self._transport!r} {http_request.url.path}",
                tls_request=getattr(self._transport, "uses_tls", False),
            ) from exc

        status = response.status_code
        response_headers = {k.lower(): v for k, v in response.headers.items()}
        self._logger.debug("<- %s %s status=%s", http_request.method, http_request.url.path, status)

        if status >= 400:
            body = await self._read_and_close(response)
            raise api_error(status, body, context=request)

        if request.stream:
            return Response(
                status=status,
                headers=response_headers,
                stream=StreamingBody(response, logger=self._logger),
            )

        body = await self._read_and_close(response)
        return Response(status=status, headers=response_headers, body=body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpDispatcher":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _read_and_close(self, response: httpx.Response) -> bytes:
        try:
            return await response.aread()
        except (httpx.HTTPError, ssl.SSLError) as exc:
            raise map_transport_error(exc, str(response.url)) from exc
        finally:
            await response.aclose()


def api_error(status: int, body: bytes, *, context: object | None = None) -> ApiError:
    message = extract_error_message(body)
    error_type = NotFoundError if status == 404 else ApiError
    return error_type(status, message, body=body, context=context)


def map_transport_error(exc: BaseException, target: str, *, tls_request: bool = False) -> TransportError:
    """Translate an httpx or ssl failure into a ``TransportError``.

    Any TLS alert in the cause chain is a ``HandshakeError``, whichever phase
    it surfaced in. ``tls_request`` marks a request on a TLS connection that
    failed before any status line arrived. TLS 1.3 servers verify the client
    certificate after the client has finished its handshake, so a rejected
    identity shows up as the peer dropping the first request.
    """
    cause = _ssl_cause(exc)
    if isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout)):
        if cause is not None:
            return HandshakeError(f"TLS handshake with {target} failed: {exc}", context=target)
        return ConnectError(f"Cannot connect to {target}: {exc}", context=target)
    if cause is not None and not isinstance(cause, (ssl.SSLEOFError, ssl.SSLZeroReturnError)):
        return HandshakeError(f"TLS session with {target} was rejected: {cause}", context=target)
    if tls_request and isinstance(exc, (httpx.ReadError, httpx.WriteError, httpx.RemoteProtocolError)):
        return HandshakeError(f"TLS peer {target} dropped the request before responding: {exc!r}", context=target)
    return TransportError(f"Transport failure talking to {target}: {exc}", context=target)


def _ssl_cause(exc: BaseException) -> ssl.SSLError | None:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLError):
            return current
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return None


__all__ = ["HttpDispatcher", "StreamingBody", "api_error", "map_transport_error"]
