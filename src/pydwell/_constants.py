"""Shared constants for pydwell."""

from __future__ import annotations

from typing import Any

#: Beacons the dashboard starts with when no registry contents are supplied.
DEFAULT_BEACONS: tuple[dict[str, Any], ...] = (
    {"id": 1, "name": "Beacon 1", "mac": "C300002267E5", "x": 100.0, "y": 100.0},
    {"id": 2, "name": "Beacon 2", "mac": "C30000354980", "x": 400.0, "y": 150.0},
    {"id": 3, "name": "Beacon 3", "mac": "C300002267E8", "x": 700.0, "y": 300.0},
)

#: Where a newly added beacon lands until an operator moves it.
DEFAULT_NEW_BEACON_POSITION: tuple[float, float] = (200.0, 200.0)

DEFAULT_TELEMETRY_URL = "ws://192.168.0.33:9010"

BEACON_NAME_TEMPLATE = "Beacon {id}"
VEHICLE_NAME_TEMPLATE = "Vehicle {id}"

#: Placeholder shown in history tables for fields of an open interval.
MISSING_VALUE = "-"
