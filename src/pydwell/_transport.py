"""WebSocket telemetry transport with reconnect backoff."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

import aiohttp

from pydwell.config import DwellConfig
from pydwell.exceptions import DwellTransportError

_logger = logging.getLogger(__name__)


class WebSocketTelemetrySource:
    """Yields raw frames from the gateway WebSocket feed.

    The connection is opened once and only re-established after the server
    closes it or a network error occurs. Beacon registry edits never touch
    the connection.
    """

    def __init__(self, config: DwellConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._stopped = asyncio.Event()
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self.connect_count = 0

    @property
    def url(self) -> str:
        return self._config.telemetry_url

    async def stop(self) -> None:
        """End iteration and close the current connection."""
        self._stopped.set()
        ws = self._ws
        if ws is not None and not ws.closed:
            await ws.close()

    async def frames(self) -> AsyncIterator[str | bytes]:
        """Iterate over text and binary frames until :meth:`stop` is called."""
        delay = self._config.reconnect_delay
        while not self._stopped.is_set():
            try:
                async for frame in self._session_frames():
                    delay = self._config.reconnect_delay
                    yield frame
            except aiohttp.ClientError as exc:
                _logger.warning("Telemetry connection to %s failed: %s", self.url, exc)
            if self._stopped.is_set():
                break
            _logger.debug("Reconnecting to %s in %.1fs", self.url, delay)
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=delay)
            except TimeoutError:
                pass
            delay = min(delay * 2, self._config.max_reconnect_delay)

    async def _session_frames(self) -> AsyncIterator[str | bytes]:
        heartbeat = self._config.heartbeat if self._config.heartbeat > 0 else None
        async with self._http.ws_connect(self.url, heartbeat=heartbeat) as ws:
            self._ws = ws
            self.connect_count += 1
            _logger.info("Connected to telemetry feed %s", self.url)
            try:
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        yield msg.data
                    elif msg.type == aiohttp.WSMsgType.BINARY:
                        yield msg.data
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        _logger.warning("Telemetry feed error: %s", ws.exception())
                        break
            finally:
                self._ws = None
        _logger.info("Telemetry feed %s closed", self.url)


def require_session(http_session: aiohttp.ClientSession | None, url: str) -> aiohttp.ClientSession:
    if http_session is None or http_session.closed:
        raise DwellTransportError(
            "Client not initialized. Use 'async with DwellClient(...) as client:'",
            url=url,
        )
    return http_session
