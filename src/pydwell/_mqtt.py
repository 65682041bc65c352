"""Internal MQTT telemetry runtime."""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from pydwell.config import DwellConfig


@dataclass(frozen=True)
class MqttFrame:
    """A raw payload received on a gateway topic."""

    topic: str
    payload: bytes


def _build_client_id() -> str:
    return f"pydwell-{secrets.token_hex(4)}"


class DwellMqttRuntime:
    """Threaded paho-mqtt runtime that hands raw frames to an asyncio loop.

    The paho network thread never parses or ingests anything itself; every
    frame is scheduled on ``loop`` with ``call_soon_threadsafe``.
    """

    def __init__(
        self,
        *,
        loop: asyncio.AbstractEventLoop,
        config: DwellConfig,
        on_frame: Callable[[MqttFrame], None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._loop = loop
        self._config = config
        self._on_frame = on_frame
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the MQTT runtime is actively running."""
        return self._running

    def _handle_message(self, msg: mqtt.MQTTMessage) -> None:
        frame = MqttFrame(topic=msg.topic, payload=bytes(msg.payload))
        self._logger.debug("MQTT frame topic=%s bytes=%d", frame.topic, len(frame.payload))
        self._loop.call_soon_threadsafe(self._on_frame, frame)

    def start(self) -> None:
        """Connect to the broker and subscribe to the gateway topic."""
        self.stop()
        config = self._config
        self._logger.debug(
            "MQTT runtime start requested host=%s port=%s topic=%s",
            config.mqtt_host,
            config.mqtt_port,
            config.mqtt_topic,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=_build_client_id(),
            protocol=mqtt.MQTTv311,
        )
        client.enable_logger(self._logger)
        if config.mqtt_username:
            client.username_pw_set(config.mqtt_username, config.mqtt_password)
        if config.mqtt_tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.is_failure:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected, subscribing topic=%s", config.mqtt_topic)
            c.subscribe(config.mqtt_topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                self._handle_message(msg)
            except RuntimeError:
                # Loop already closed during shutdown.
                self._logger.debug("MQTT frame dropped", exc_info=True)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        client.connect(config.mqtt_host, config.mqtt_port, keepalive=config.mqtt_keepalive)
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect current MQTT client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")
