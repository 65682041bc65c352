"""Data models for beacons, telemetry and tracked vehicles."""

from pydwell.models._base import DwellBaseModel
from pydwell.models.beacon import Beacon, Position
from pydwell.models.telemetry import Observation, TelemetryEvent
from pydwell.models.vehicle import DwellRecord, Vehicle

__all__ = [
    "Beacon",
    "DwellBaseModel",
    "DwellRecord",
    "Observation",
    "Position",
    "TelemetryEvent",
    "Vehicle",
]
