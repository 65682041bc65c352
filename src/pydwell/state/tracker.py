"""Dwell tracker.

This is the only component allowed to mutate vehicle state. Each telemetry
event is reduced to its dominant beacon, and the vehicle's dwell history is
either continued or closed and reopened at the new beacon.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from enum import StrEnum

from pydwell._constants import VEHICLE_NAME_TEMPLATE
from pydwell.exceptions import UnknownVehicleError
from pydwell.ingestion.normalize import normalize_mac
from pydwell.ingestion.telemetry import select_dominant_observation
from pydwell.models.beacon import Beacon
from pydwell.models.telemetry import Observation, TelemetryEvent
from pydwell.models.vehicle import DwellRecord, Vehicle

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class IngestOutcome(StrEnum):
    """What :meth:`DwellTracker.ingest` did with an event."""

    IGNORED_EMPTY = "ignored_empty"
    IGNORED_UNKNOWN_BEACON = "ignored_unknown_beacon"
    CREATED = "created"
    UPDATED = "updated"
    TRANSITIONED = "transitioned"

    @property
    def changed_state(self) -> bool:
        return self not in (IngestOutcome.IGNORED_EMPTY, IngestOutcome.IGNORED_UNKNOWN_BEACON)


def _resolve_beacon(observation: Observation, beacons: Iterable[Beacon]) -> Beacon | None:
    mac = normalize_mac(observation.mac)
    for beacon in beacons:
        if beacon.mac and beacon.mac == mac:
            return beacon
    return None


class DwellTracker:
    """In-memory per-gateway vehicle state and dwell history.

    Durations are measured with the injected ``clock`` at processing time,
    not with the gateway's own ``tm`` timestamp. A vehicle that stops
    reporting keeps its last interval open indefinitely.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], datetime] = _utcnow,
        name_template: str = VEHICLE_NAME_TEMPLATE,
    ) -> None:
        self._clock = clock
        self._name_template = name_template
        self._vehicles: dict[str, Vehicle] = {}
        self._next_vehicle_id = 1

    def __len__(self) -> int:
        return len(self._vehicles)

    def __contains__(self, gateway_id: object) -> bool:
        return gateway_id in self._vehicles

    def ingest(self, event: TelemetryEvent, beacons: Iterable[Beacon]) -> IngestOutcome:
        """Apply one telemetry event.

        ``beacons`` is read in full on every call, so it may be a live
        :class:`pydwell.registry.BeaconRegistry` edited between events.
        Anomalous events (no observations, unknown MAC) are ignored; the only
        error raised is ``TypeError`` for a missing event.
        """
        if event is None:
            raise TypeError("ingest() requires a TelemetryEvent, got None")

        dominant = select_dominant_observation(event.observations)
        if dominant is None:
            return IngestOutcome.IGNORED_EMPTY

        beacon = _resolve_beacon(dominant, beacons)
        if beacon is None:
            _logger.debug("No beacon registered for MAC %s (gateway=%s)", dominant.mac, event.gateway_id)
            return IngestOutcome.IGNORED_UNKNOWN_BEACON

        now = self._clock()
        vehicle = self._vehicles.get(event.gateway_id)
        if vehicle is None:
            vehicle = self._create_vehicle(event.gateway_id, beacon, now)
            outcome = IngestOutcome.CREATED
        elif vehicle.current_beacon is not None and vehicle.current_beacon.id == beacon.id:
            outcome = IngestOutcome.UPDATED
        else:
            self._transition(vehicle, beacon, now)
            outcome = IngestOutcome.TRANSITIONED

        vehicle.current_beacon = beacon
        vehicle.position = beacon.position
        vehicle.last_seen = now
        vehicle.last_rssi = dominant.rssi
        return outcome

    def _create_vehicle(self, gateway_id: str, beacon: Beacon, now: datetime) -> Vehicle:
        vehicle_id = self._next_vehicle_id
        self._next_vehicle_id += 1
        vehicle = Vehicle(
            id=vehicle_id,
            name=self._name_template.format(id=vehicle_id),
            gateway_id=gateway_id,
            history=[DwellRecord.open_at(beacon, now)],
        )
        self._vehicles[gateway_id] = vehicle
        _logger.info("New vehicle %s (gateway=%s) at beacon %s", vehicle.name, gateway_id, beacon.name)
        return vehicle

    def _transition(self, vehicle: Vehicle, beacon: Beacon, now: datetime) -> None:
        # Only the last record may be open; closing it is the single
        # in-place history mutation.
        open_record = vehicle.open_record
        if open_record is not None:
            closed = open_record.close(now)
            vehicle.history[-1] = closed
            _logger.info(
                "%s left %s after %ss, entered %s",
                vehicle.name,
                closed.beacon_name,
                closed.duration_seconds,
                beacon.name,
            )
        vehicle.history.append(DwellRecord.open_at(beacon, now))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def vehicles(self) -> list[Vehicle]:
        """Snapshot of all vehicles in creation order."""
        return [vehicle.model_copy(deep=True) for vehicle in self._vehicles.values()]

    def get_vehicle(self, gateway_id: str) -> Vehicle | None:
        vehicle = self._vehicles.get(gateway_id)
        return vehicle.model_copy(deep=True) if vehicle is not None else None

    def rename_vehicle(self, gateway_id: str, name: str) -> Vehicle:
        vehicle = self._vehicles.get(gateway_id)
        if vehicle is None:
            raise UnknownVehicleError(f"No vehicle tracked for gateway {gateway_id}")
        vehicle.name = name
        return vehicle.model_copy(deep=True)
