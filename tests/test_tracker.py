"""Tests for DwellTracker stream-to-history reconciliation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from pydwell.exceptions import UnknownVehicleError
from pydwell.models.beacon import Beacon, Position
from pydwell.models.telemetry import TelemetryEvent
from pydwell.registry import BeaconRegistry
from pydwell.state.tracker import DwellTracker, IngestOutcome


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _event(gw: str, *adv: tuple[str, float]) -> TelemetryEvent:
    return TelemetryEvent.model_validate(
        {"gw": gw, "tm": "2026-01-01T12:00:00Z", "adv": [{"mac": mac, "rssi": rssi} for mac, rssi in adv]}
    )


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


@pytest.fixture
def tracker(clock: _Clock) -> DwellTracker:
    return DwellTracker(clock=clock)


@pytest.fixture
def registry() -> BeaconRegistry:
    return BeaconRegistry(
        [
            {"id": 1, "name": "B1", "mac": "M1", "x": 10, "y": 20},
            {"id": 2, "name": "B2", "mac": "M2", "x": 30, "y": 40},
        ]
    )


# ------------------------------------------------------------------
# Ignored events
# ------------------------------------------------------------------


def test_empty_observations_is_noop(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    before = tracker.vehicles()

    outcome = tracker.ingest(_event("G1"), registry)
    outcome_new_gw = tracker.ingest(_event("G2"), registry)

    assert outcome == IngestOutcome.IGNORED_EMPTY
    assert outcome_new_gw == IngestOutcome.IGNORED_EMPTY
    assert tracker.vehicles() == before


def test_missing_adv_is_noop(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    event = TelemetryEvent.model_validate({"gw": "G1", "tm": "x"})

    assert tracker.ingest(event, registry) == IngestOutcome.IGNORED_EMPTY
    assert len(tracker) == 0


def test_unknown_dominant_mac_is_noop(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    before = tracker.vehicles()

    # M9 dominates but is unregistered; M1 is not used as a fallback.
    outcome = tracker.ingest(_event("G1", ("M9", -20), ("M2", -50)), registry)

    assert outcome == IngestOutcome.IGNORED_UNKNOWN_BEACON
    assert tracker.vehicles() == before


def test_unknown_mac_does_not_create_vehicle(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    assert tracker.ingest(_event("G1", ("FF", -10)), registry) == IngestOutcome.IGNORED_UNKNOWN_BEACON
    assert "G1" not in tracker


def test_none_event_is_programming_error(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    with pytest.raises(TypeError):
        tracker.ingest(None, registry)  # type: ignore[arg-type]


# ------------------------------------------------------------------
# Vehicle creation and dominant selection
# ------------------------------------------------------------------


def test_new_vehicle_created(tracker: DwellTracker, registry: BeaconRegistry, clock: _Clock) -> None:
    outcome = tracker.ingest(_event("G1", ("M1", -40)), registry)

    assert outcome == IngestOutcome.CREATED
    vehicles = tracker.vehicles()
    assert len(vehicles) == 1
    vehicle = vehicles[0]
    assert vehicle.gateway_id == "G1"
    assert vehicle.id == 1
    assert vehicle.name == "Vehicle 1"
    assert vehicle.current_beacon is not None
    assert vehicle.current_beacon.id == 1
    assert vehicle.position == Position(x=10, y=20)
    assert vehicle.last_seen == clock.now
    assert vehicle.last_rssi == -40
    assert len(vehicle.history) == 1
    record = vehicle.history[0]
    assert record.beacon_id == 1
    assert record.beacon_name == "B1"
    assert record.entry_time == clock.now
    assert record.exit_time is None
    assert record.duration_seconds is None


def test_strongest_rssi_wins(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -70), ("M2", -30)), registry)

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert vehicle.current_beacon is not None
    assert vehicle.current_beacon.mac == "M2"
    assert vehicle.position == Position(x=30, y=40)


def test_rssi_tie_keeps_first_observation(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M2", -50), ("M1", -50)), registry)

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert vehicle.current_beacon is not None
    assert vehicle.current_beacon.id == 2


def test_mac_matching_ignores_case_and_separators(tracker: DwellTracker) -> None:
    beacons = [Beacon(id=7, name="Dock", mac="c3:00:00:22:67:e5", x=1, y=2)]

    assert tracker.ingest(_event("G1", ("C300002267E5", -60)), beacons) == IngestOutcome.CREATED


# ------------------------------------------------------------------
# Dwell transitions
# ------------------------------------------------------------------


def test_transition_closes_prior_interval(tracker: DwellTracker, registry: BeaconRegistry, clock: _Clock) -> None:
    t0 = clock.now
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    clock.advance(42.4)
    t1 = clock.now

    outcome = tracker.ingest(_event("G1", ("M1", -80), ("M2", -35)), registry)

    assert outcome == IngestOutcome.TRANSITIONED
    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert len(vehicle.history) == 2
    first, second = vehicle.history
    assert first.entry_time == t0
    assert first.exit_time == t1
    assert first.duration_seconds == 42
    assert second.beacon_id == 2
    assert second.entry_time == t1
    assert second.is_open
    assert vehicle.position == Position(x=30, y=40)


def test_duration_rounds_half_up(tracker: DwellTracker, registry: BeaconRegistry, clock: _Clock) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    clock.advance(2.5)
    tracker.ingest(_event("G1", ("M2", -40)), registry)

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert vehicle.history[0].duration_seconds == 3


def test_same_beacon_does_not_fragment_history(
    tracker: DwellTracker, registry: BeaconRegistry, clock: _Clock
) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    for _ in range(5):
        clock.advance(1)
        assert tracker.ingest(_event("G1", ("M1", -45)), registry) == IngestOutcome.UPDATED

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert len(vehicle.history) == 1
    assert vehicle.history[0].is_open
    assert vehicle.last_rssi == -45


def test_same_beacon_follows_beacon_move(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    registry.move_beacon(1, 99, 101)

    tracker.ingest(_event("G1", ("M1", -40)), registry)

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert vehicle.position == Position(x=99, y=101)
    assert len(vehicle.history) == 1


def test_history_invariants_over_a_route(tracker: DwellTracker, registry: BeaconRegistry, clock: _Clock) -> None:
    route = ["M1", "M1", "M2", "M2", "M1", "M2", "M2", "M2", "M1"]
    for mac in route:
        clock.advance(3)
        tracker.ingest(_event("G1", (mac, -50)), registry)

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert [r.beacon_id for r in vehicle.history] == [1, 2, 1, 2, 1]
    assert all(not r.is_open for r in vehicle.history[:-1])
    assert all(r.duration_seconds is not None for r in vehicle.history[:-1])
    assert vehicle.history[-1].is_open
    entries = [r.entry_time for r in vehicle.history]
    assert entries == sorted(entries)
    for closed, following in zip(vehicle.history, vehicle.history[1:], strict=False):
        assert closed.exit_time == following.entry_time


def test_history_snapshot_survives_beacon_rename_and_removal(
    tracker: DwellTracker, registry: BeaconRegistry
) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    registry.rename_beacon(1, "Renamed")
    registry.remove_beacon(1)

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert vehicle.history[0].beacon_name == "B1"

    # The removed beacon no longer resolves.
    assert tracker.ingest(_event("G1", ("M1", -40)), registry) == IngestOutcome.IGNORED_UNKNOWN_BEACON


def test_registry_read_fresh_per_event(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    assert tracker.ingest(_event("G1", ("M3", -40)), registry) == IngestOutcome.IGNORED_UNKNOWN_BEACON

    registry.add_beacon(name="B3", mac="M3", x=5, y=5)

    assert tracker.ingest(_event("G1", ("M3", -40)), registry) == IngestOutcome.CREATED


# ------------------------------------------------------------------
# Identity and ownership
# ------------------------------------------------------------------


def test_vehicle_ids_are_monotonic(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    tracker.ingest(_event("G2", ("M1", -40)), registry)
    registry.remove_beacon(2)
    tracker.ingest(_event("G3", ("M1", -40)), registry)

    ids = [v.id for v in tracker.vehicles()]
    assert ids == [1, 2, 3]
    assert [v.gateway_id for v in tracker.vehicles()] == ["G1", "G2", "G3"]


def test_vehicles_are_independent_per_gateway(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)
    tracker.ingest(_event("G2", ("M2", -40)), registry)
    tracker.ingest(_event("G1", ("M2", -40)), registry)

    g1 = tracker.get_vehicle("G1")
    g2 = tracker.get_vehicle("G2")
    assert g1 is not None and g2 is not None
    assert len(g1.history) == 2
    assert len(g2.history) == 1


def test_snapshots_are_copies(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)

    snapshot = tracker.vehicles()[0]
    snapshot.history.clear()
    snapshot.name = "mutated"

    vehicle = tracker.get_vehicle("G1")
    assert vehicle is not None
    assert len(vehicle.history) == 1
    assert vehicle.name == "Vehicle 1"


def test_independent_trackers_do_not_share_state(registry: BeaconRegistry) -> None:
    first = DwellTracker()
    second = DwellTracker()

    first.ingest(_event("G1", ("M1", -40)), registry)

    assert len(first) == 1
    assert len(second) == 0


def test_rename_vehicle(tracker: DwellTracker, registry: BeaconRegistry) -> None:
    tracker.ingest(_event("G1", ("M1", -40)), registry)

    renamed = tracker.rename_vehicle("G1", "Forklift A")

    assert renamed.name == "Forklift A"
    assert tracker.vehicles()[0].name == "Forklift A"
    with pytest.raises(UnknownVehicleError):
        tracker.rename_vehicle("nope", "x")
