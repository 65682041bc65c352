"""Client configuration for pydwell."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pydwell._constants import DEFAULT_TELEMETRY_URL
from pydwell.exceptions import DwellConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value.strip())
    except ValueError as exc:
        raise DwellConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class DwellConfig:
    """Client configuration.

    Parameters
    ----------
    telemetry_url : str
        WebSocket URL of the gateway telemetry feed.
    websocket_enabled : bool
        Consume the WebSocket feed in :meth:`pydwell.client.DwellClient.run`.
    reconnect_delay : float
        Initial delay in seconds before reconnecting after the feed closes.
        Doubles after every failed attempt.
    max_reconnect_delay : float
        Upper bound for the reconnect backoff.
    heartbeat : float
        WebSocket ping interval in seconds. ``0`` disables pings.
    mqtt_enabled : bool
        Also consume telemetry from an MQTT broker.
    mqtt_host : str
        MQTT broker host name.
    mqtt_port : int
        MQTT broker port.
    mqtt_topic : str
        Topic filter the gateways publish to.
    mqtt_username : str or None
        Optional broker user name.
    mqtt_password : str or None
        Optional broker password.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_tls : bool
        Connect to the broker over TLS.
    """

    telemetry_url: str = DEFAULT_TELEMETRY_URL
    websocket_enabled: bool = True
    reconnect_delay: float = 1.0
    max_reconnect_delay: float = 30.0
    heartbeat: float = 30.0
    mqtt_enabled: bool = False
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_topic: str = "gw/+/status"
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_keepalive: int = 60
    mqtt_tls: bool = False

    def __post_init__(self) -> None:
        if self.reconnect_delay <= 0:
            raise DwellConfigError("reconnect_delay must be positive")
        if self.max_reconnect_delay < self.reconnect_delay:
            raise DwellConfigError("max_reconnect_delay must be >= reconnect_delay")

    @classmethod
    def from_env(cls, **overrides: Any) -> DwellConfig:
        """Create configuration from environment variables.

        Reads optional ``DWELL_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        DwellConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "DWELL_TELEMETRY_URL": "telemetry_url",
            "DWELL_MQTT_HOST": "mqtt_host",
            "DWELL_MQTT_TOPIC": "mqtt_topic",
            "DWELL_MQTT_USERNAME": "mqtt_username",
            "DWELL_MQTT_PASSWORD": "mqtt_password",
        }
        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "DWELL_RECONNECT_DELAY": ("reconnect_delay", float),
            "DWELL_MAX_RECONNECT_DELAY": ("max_reconnect_delay", float),
            "DWELL_HEARTBEAT": ("heartbeat", float),
            "DWELL_MQTT_PORT": ("mqtt_port", int),
            "DWELL_MQTT_KEEPALIVE": ("mqtt_keepalive", int),
        }
        _ENV_BOOL_MAP = {
            "DWELL_WEBSOCKET_ENABLED": ("websocket_enabled", True),
            "DWELL_MQTT_ENABLED": ("mqtt_enabled", False),
            "DWELL_MQTT_TLS": ("mqtt_tls", False),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val

        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        for env_key, (field_name, default) in _ENV_BOOL_MAP.items():
            if field_name not in overrides:
                config_kwargs[field_name] = _env_bool(env.get(env_key), default)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
