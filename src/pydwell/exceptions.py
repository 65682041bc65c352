"""Custom exception hierarchy for pydwell."""

from __future__ import annotations


class DwellError(Exception):
    """Base exception for all pydwell errors."""


class DwellConfigError(DwellError):
    """Invalid or missing configuration."""


class BeaconRegistryError(DwellError):
    """A beacon registry command could not be applied."""


class DuplicateBeaconError(BeaconRegistryError):
    """Another beacon is already registered with the same MAC address."""

    def __init__(self, message: str, *, mac: str = "") -> None:
        self.mac = mac
        super().__init__(message)


class UnknownBeaconError(BeaconRegistryError):
    """No beacon with the requested id is registered."""

    def __init__(self, message: str, *, beacon_id: int | None = None) -> None:
        self.beacon_id = beacon_id
        super().__init__(message)


class RegistryLockedError(BeaconRegistryError):
    """Editing is disabled on the registry.

    Raised for every mutating command issued while
    :attr:`pydwell.registry.BeaconRegistry.editing` is ``False``.
    """


class UnknownVehicleError(DwellError):
    """No vehicle is tracked for the requested gateway."""


class DwellTransportError(DwellError):
    """Telemetry transport failure (connection refused, protocol error, misuse)."""

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
    ) -> None:
        self.url = url
        super().__init__(message)
