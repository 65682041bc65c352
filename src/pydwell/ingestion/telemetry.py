"""Gateway telemetry decoding.

Translates raw frames from the WebSocket or MQTT feed into
:class:`pydwell.models.TelemetryEvent` objects. Wireless telemetry is
lossy, so nothing here raises on bad input: undecodable frames are logged
at DEBUG and dropped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

from pydwell.models.telemetry import Observation, TelemetryEvent

_logger = logging.getLogger(__name__)


def _load_json(payload: str | bytes | bytearray) -> Any:
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8", errors="replace")
    try:
        return json.loads(payload)
    except (ValueError, RecursionError):
        _logger.debug("Dropping non-JSON telemetry frame: %.120s", payload)
        return None


def _event_from_object(data: Any) -> TelemetryEvent | None:
    if not isinstance(data, dict):
        _logger.debug("Dropping telemetry frame that is not a JSON object: %.120r", data)
        return None
    try:
        return TelemetryEvent.model_validate(data)
    except ValidationError as exc:
        _logger.debug("Dropping invalid telemetry frame: %s", exc.errors(include_url=False))
        return None


def decode_telemetry_message(payload: str | bytes | bytearray | dict[str, Any]) -> TelemetryEvent | None:
    """Decode a single ``{"gw", "tm", "adv"}`` message.

    Returns ``None`` for invalid JSON, non-object JSON or a message without a
    gateway id.
    """
    data = payload if isinstance(payload, dict) else _load_json(payload)
    return _event_from_object(data)


def decode_telemetry_messages(payload: str | bytes | bytearray | dict[str, Any] | list[Any]) -> list[TelemetryEvent]:
    """Decode a frame that may carry one message or a JSON array of them.

    Some gateway firmwares batch reports; undecodable entries are skipped.
    """
    data = payload if isinstance(payload, (dict, list)) else _load_json(payload)
    if isinstance(data, list):
        events = [_event_from_object(item) for item in data]
        return [event for event in events if event is not None]
    event = _event_from_object(data)
    return [event] if event is not None else []


def select_dominant_observation(observations: Sequence[Observation]) -> Observation | None:
    """Return the observation with the numerically greatest ``rssi``.

    Ties keep the first observation in gateway order. ``None`` when there
    are no observations.
    """
    dominant: Observation | None = None
    for observation in observations:
        if dominant is None or observation.rssi > dominant.rssi:
            dominant = observation
    return dominant
