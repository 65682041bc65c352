from __future__ import annotations

import pytest

from pydwell.config import DwellConfig
from pydwell.exceptions import DwellConfigError


def test_defaults() -> None:
    config = DwellConfig()

    assert config.telemetry_url == "ws://192.168.0.33:9010"
    assert config.websocket_enabled is True
    assert config.mqtt_enabled is False


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DWELL_TELEMETRY_URL", "ws://gateway.local:9010")
    monkeypatch.setenv("DWELL_MQTT_ENABLED", "yes")
    monkeypatch.setenv("DWELL_MQTT_PORT", "8883")
    monkeypatch.setenv("DWELL_RECONNECT_DELAY", "0.5")

    config = DwellConfig.from_env()

    assert config.telemetry_url == "ws://gateway.local:9010"
    assert config.mqtt_enabled is True
    assert config.mqtt_port == 8883
    assert config.reconnect_delay == 0.5


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DWELL_TELEMETRY_URL", "ws://env:1")
    monkeypatch.setenv("DWELL_MQTT_ENABLED", "true")

    config = DwellConfig.from_env(telemetry_url="ws://override:2", mqtt_enabled=False)

    assert config.telemetry_url == "ws://override:2"
    assert config.mqtt_enabled is False


def test_unparseable_bool_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DWELL_WEBSOCKET_ENABLED", "maybe")

    assert DwellConfig.from_env().websocket_enabled is True


def test_invalid_number_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DWELL_MQTT_PORT", "eighty")

    with pytest.raises(DwellConfigError):
        DwellConfig.from_env()


def test_invalid_backoff_rejected() -> None:
    with pytest.raises(DwellConfigError):
        DwellConfig(reconnect_delay=0)
    with pytest.raises(DwellConfigError):
        DwellConfig(reconnect_delay=10, max_reconnect_delay=5)
