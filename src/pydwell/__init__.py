"""pydwell - Beacon dwell tracking for BLE gateway telemetry."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pydwell")
except PackageNotFoundError:
    __version__ = "0+local"
from pydwell.client import DwellClient
from pydwell.config import DwellConfig
from pydwell.exceptions import (
    BeaconRegistryError,
    DuplicateBeaconError,
    DwellConfigError,
    DwellError,
    DwellTransportError,
    RegistryLockedError,
    UnknownBeaconError,
    UnknownVehicleError,
)
from pydwell.ingestion.telemetry import decode_telemetry_message, decode_telemetry_messages
from pydwell.models import Beacon, DwellRecord, Observation, Position, TelemetryEvent, Vehicle
from pydwell.registry import BeaconRegistry
from pydwell.state.tracker import DwellTracker, IngestOutcome

__all__ = [
    "__version__",
    "Beacon",
    "BeaconRegistry",
    "BeaconRegistryError",
    "DuplicateBeaconError",
    "DwellClient",
    "DwellConfig",
    "DwellConfigError",
    "DwellError",
    "DwellRecord",
    "DwellTracker",
    "DwellTransportError",
    "IngestOutcome",
    "Observation",
    "Position",
    "RegistryLockedError",
    "TelemetryEvent",
    "UnknownBeaconError",
    "UnknownVehicleError",
    "Vehicle",
    "decode_telemetry_message",
    "decode_telemetry_messages",
]
