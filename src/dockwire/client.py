"""High-level client wiring config, transport and dispatcher together."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Any, AsyncIterator, Mapping

from .config import ConnectionConfig
from .dispatcher import HttpDispatcher
from .logger import BoundLogger, LogLevel, create_logger
from .stream import demultiplex, is_multiplexed, is_raw_stream, iter_json_lines, passthrough
from .transport import Transport, select_transport
from .types import MultiplexedFrame, Process, Request, Response


@dataclass
class ClientOptions:
    config: ConnectionConfig | None = None
    base_url: str | None = None
    api_version: str | None = None
    transport: Transport | None = None
    default_headers: Mapping[str, str] | None = None
    logger: logging.Logger | BoundLogger | None = None
    log_level: LogLevel = "info"


class DockerClient:
    """Primary entry point for talking to a Docker daemon.

    With no arguments the connection is read from the Docker environment
    (``DOCKER_HOST``, ``DOCKER_TLS_VERIFY``, ``DOCKER_CERT_PATH``).
    """

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        *,
        base_url: str | None = None,
        api_version: str | None = None,
        transport: Transport | None = None,
        default_headers: Mapping[str, str] | None = None,
        logger: logging.Logger | BoundLogger | None = None,
        log_level: LogLevel = "info",
    ) -> None:
        options = ClientOptions(
            config=config,
            base_url=base_url,
            api_version=api_version,
            transport=transport,
            default_headers=default_headers,
            logger=logger,
            log_level=log_level,
        )
        self._logger = create_logger(logger=options.logger, level=options.log_level)
        if options.transport is None:
            self.config = self._resolve_config(options)
            self._transport = select_transport(self.config, logger=self._logger)
        else:
            self.config = options.config
            self._transport = options.transport
        self._prefix = f"/v{options.api_version.lstrip('v')}" if options.api_version else ""
        self._dispatcher = HttpDispatcher(
            self._transport,
            logger=self._logger,
            default_headers=options.default_headers,
        )
        self._logger.info("Initialized DockerClient via %r", self._transport)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any) -> "DockerClient":
        return cls(ConnectionConfig.from_env(environ), **kwargs)

    @property
    def transport(self) -> Transport:
        return self._transport

    async def send(self, request: Request) -> Response:
        return await self._dispatcher.send(request)

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any | None = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        stream: bool = False,
    ) -> Response:
        return await self.send(
            Request(
                method=method,
                path=self._prefix + path,
                body=body,
                params=params,
                headers=headers,
                stream=stream,
            )
        )

    async def ping(self) -> bytes:
        response = await self.request("GET", "/_ping")
        return response.body or b""

    async def version(self) -> Any:
        return await self._get_json("/version")

    async def info(self) -> Any:
        return await self._get_json("/info")

    async def containers(
        self,
        *,
        all: bool = False,
        limit: int | None = None,
        since: str | None = None,
        before: str | None = None,
        size: bool | None = None,
        filters: Mapping[str, list[str]] | None = None,
    ) -> Any:
        params: dict[str, Any] = {"all": all, "limit": limit, "since": since, "before": before, "size": size}
        if filters:
            params["filters"] = dict(filters)
        return await self._get_json("/containers/json", params=params)

    async def container(self, container_id: str) -> Any:
        return await self._get_json(f"/containers/{container_id}/json")

    async def top(self, container_id: str, ps_args: str | None = None) -> Any:
        return await self._get_json(f"/containers/{container_id}/top", params={"ps_args": ps_args})

    async def processes(self, container_id: str, ps_args: str | None = None) -> list[Process]:
        return Process.from_top(await self.top(container_id, ps_args=ps_args))

    async def changes(self, container_id: str) -> Any:
        return await self._get_json(f"/containers/{container_id}/changes")

    async def images(self, *, all: bool = False) -> Any:
        return await self._get_json("/images/json", params={"all": all})

    async def logs(
        self,
        container_id: str,
        *,
        stdout: bool = True,
        stderr: bool = True,
        follow: bool = False,
        timestamps: bool = False,
        tail: int | str | None = None,
        tty: bool = False,
    ) -> AsyncIterator[MultiplexedFrame]:
        """Stream container output as frames.

        The reply's content type decides the framing. A raw stream, which is
        what TTY containers send, is passed through with each chunk as a
        stdout frame. ``tty=True`` also treats an unlabeled body as raw.
        """
        params = {
            "stdout": stdout,
            "stderr": stderr,
            "follow": follow,
            "timestamps": timestamps,
            "tail": tail,
        }
        response = await self.request("GET", f"/containers/{container_id}/logs", params=params, stream=True)
        assert response.stream is not None
        content_type = response.content_type
        if is_raw_stream(content_type) or (tty and not is_multiplexed(content_type)):
            return passthrough(response.stream)
        return demultiplex(response.stream)

    async def events(self, *, filters: Mapping[str, list[str]] | None = None) -> AsyncIterator[Any]:
        params: dict[str, Any] = {}
        if filters:
            params["filters"] = dict(filters)
        response = await self.request("GET", "/events", params=params, stream=True)
        assert response.stream is not None
        return iter_json_lines(response.stream)

    async def export(self, container_id: str) -> Response:
        """Return the container filesystem as a streaming tar response."""
        return await self.request("GET", f"/containers/{container_id}/export", stream=True)

    async def aclose(self) -> None:
        await self._dispatcher.aclose()

    async def __aenter__(self) -> "DockerClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _get_json(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        response = await self.request("GET", path, params=params)
        return response.json()

    def _resolve_config(self, options: ClientOptions) -> ConnectionConfig:
        if options.config is not None:
            return options.config
        if options.base_url is not None:
            return ConnectionConfig.from_url(options.base_url)
        return ConnectionConfig.from_env()


__all__ = ["ClientOptions", "DockerClient"]
