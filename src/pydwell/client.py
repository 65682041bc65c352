"""High-level async client wiring telemetry feeds to the dwell tracker."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pydwell._mqtt import DwellMqttRuntime, MqttFrame
from pydwell._transport import WebSocketTelemetrySource, require_session
from pydwell.config import DwellConfig
from pydwell.ingestion.telemetry import decode_telemetry_messages
from pydwell.models.vehicle import Vehicle
from pydwell.registry import BeaconRegistry
from pydwell.state.tracker import DwellTracker, IngestOutcome

_logger = logging.getLogger(__name__)


class DwellClient:
    """Async client that feeds gateway telemetry into a :class:`DwellTracker`.

    Usage::

        async with DwellClient(DwellConfig.from_env()) as client:
            client.registry.add_beacon(name="Dock", mac="C300002267E9")
            await client.run()

    The WebSocket feed is opened once by :meth:`run`; editing the beacon
    registry while it runs does not reconnect it.
    """

    def __init__(
        self,
        config: DwellConfig | None = None,
        *,
        registry: BeaconRegistry | None = None,
        tracker: DwellTracker | None = None,
        session: aiohttp.ClientSession | None = None,
        on_update: Callable[[Vehicle, IngestOutcome], None] | None = None,
    ) -> None:
        self._config = config or DwellConfig()
        self._registry = registry if registry is not None else BeaconRegistry()
        self._tracker = tracker if tracker is not None else DwellTracker()
        self._external_session = session is not None
        self._http_session = session
        self._loop: asyncio.AbstractEventLoop | None = None
        self._source: WebSocketTelemetrySource | None = None
        self._mqtt_runtime: DwellMqttRuntime | None = None
        self._stop_requested = False
        self._on_update = on_update

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> DwellClient:
        self._loop = asyncio.get_running_loop()
        self._stop_requested = False
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._start_mqtt()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        self._stop_mqtt()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._loop = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> DwellConfig:
        return self._config

    @property
    def registry(self) -> BeaconRegistry:
        return self._registry

    @property
    def tracker(self) -> DwellTracker:
        return self._tracker

    def vehicles(self) -> list[Vehicle]:
        """Current vehicle snapshot, re-read after every ingested frame."""
        return self._tracker.vehicles()

    def handle_payload(self, payload: str | bytes | dict[str, Any] | list[Any]) -> list[IngestOutcome]:
        """Decode one frame and ingest every message it carries.

        Both the WebSocket and MQTT feeds funnel into this method. Frames
        that cannot be decoded yield no outcomes.
        """
        outcomes: list[IngestOutcome] = []
        for event in decode_telemetry_messages(payload):
            outcome = self._tracker.ingest(event, self._registry)
            outcomes.append(outcome)
            if outcome.changed_state:
                self._notify(event.gateway_id, outcome)
        return outcomes

    async def run(self) -> None:
        """Consume the WebSocket feed until :meth:`stop` is called.

        Returns immediately if :meth:`stop` was already called in this
        context.
        """
        if self._stop_requested:
            return
        if not self._config.websocket_enabled:
            _logger.debug("WebSocket feed disabled; nothing to run")
            return
        http_session = require_session(self._http_session, self._config.telemetry_url)
        source = WebSocketTelemetrySource(self._config, http_session)
        self._source = source
        try:
            async for frame in source.frames():
                self.handle_payload(frame)
        finally:
            self._source = None

    async def stop(self) -> None:
        """Stop a running :meth:`run` loop, or prevent the next one from starting."""
        self._stop_requested = True
        source = self._source
        if source is not None:
            await source.stop()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _notify(self, gateway_id: str, outcome: IngestOutcome) -> None:
        if self._on_update is None:
            return
        vehicle = self._tracker.get_vehicle(gateway_id)
        if vehicle is None:
            return
        try:
            self._on_update(vehicle, outcome)
        except Exception:
            _logger.debug("on_update callback failed", exc_info=True)

    def _start_mqtt(self) -> None:
        """Best-effort MQTT startup (failures must not break the WebSocket feed)."""
        if not self._config.mqtt_enabled:
            return
        if self._mqtt_runtime is not None and self._mqtt_runtime.is_running:
            return
        loop = self._loop or asyncio.get_running_loop()
        try:
            runtime = DwellMqttRuntime(
                loop=loop,
                config=self._config,
                on_frame=self._on_mqtt_frame,
                logger=_logger,
            )
            runtime.start()
            self._mqtt_runtime = runtime
        except Exception:
            _logger.warning("MQTT startup failed", exc_info=True)

    def _stop_mqtt(self) -> None:
        runtime = self._mqtt_runtime
        self._mqtt_runtime = None
        if runtime is not None:
            runtime.stop()

    def _on_mqtt_frame(self, frame: MqttFrame) -> None:
        """Handle a raw MQTT frame (called on the loop via call_soon_threadsafe)."""
        self.handle_payload(frame.payload)
