from __future__ import annotations

import pytest

from pydwell.exceptions import DuplicateBeaconError, RegistryLockedError, UnknownBeaconError
from pydwell.models.beacon import Beacon
from pydwell.registry import BeaconRegistry


def test_default_registry_seeded_with_demo_beacons() -> None:
    registry = BeaconRegistry()

    assert [b.mac for b in registry] == ["C300002267E5", "C30000354980", "C300002267E8"]
    assert registry.get(2) == Beacon(id=2, name="Beacon 2", mac="C30000354980", x=400, y=150)


def test_empty_registry() -> None:
    assert len(BeaconRegistry([])) == 0


def test_add_beacon_defaults() -> None:
    registry = BeaconRegistry([])

    beacon = registry.add_beacon()

    assert beacon.id == 1
    assert beacon.name == "Beacon 1"
    assert beacon.mac == ""
    assert (beacon.x, beacon.y) == (200.0, 200.0)


def test_add_beacon_normalizes_mac() -> None:
    registry = BeaconRegistry([])

    beacon = registry.add_beacon(name="Dock", mac="c3-00-00-22-67-e9", x=5, y=6)

    assert beacon.mac == "C300002267E9"
    assert registry.find_by_mac("C3:00:00:22:67:E9") == beacon


def test_duplicate_mac_rejected_and_id_not_consumed() -> None:
    registry = BeaconRegistry([])
    registry.add_beacon(mac="AA")

    with pytest.raises(DuplicateBeaconError) as exc_info:
        registry.add_beacon(mac="aa")

    assert exc_info.value.mac == "AA"
    assert registry.add_beacon(mac="BB").id == 2


def test_placeholder_beacons_may_share_empty_mac() -> None:
    registry = BeaconRegistry([])
    registry.add_beacon()
    registry.add_beacon()

    assert len(registry) == 2
    assert registry.find_by_mac("") is None


def test_ids_never_reused_after_removal() -> None:
    registry = BeaconRegistry()
    registry.remove_beacon(3)

    beacon = registry.add_beacon(mac="NEW")

    assert beacon.id == 4
    assert 3 not in registry


def test_move_beacon_replaces_value() -> None:
    registry = BeaconRegistry()
    original = registry.get(1)

    moved = registry.move_beacon(1, 12.5, 13.5)

    assert (moved.x, moved.y) == (12.5, 13.5)
    assert original is not None
    assert (original.x, original.y) == (100.0, 100.0)
    assert registry.get(1) == moved


def test_rename_beacon() -> None:
    registry = BeaconRegistry()

    assert registry.rename_beacon(1, "Gate").name == "Gate"
    assert registry.find_by_mac("C300002267E5").name == "Gate"  # type: ignore[union-attr]


def test_unknown_beacon_commands_raise() -> None:
    registry = BeaconRegistry([])

    with pytest.raises(UnknownBeaconError) as exc_info:
        registry.move_beacon(42, 0, 0)
    assert exc_info.value.beacon_id == 42

    with pytest.raises(UnknownBeaconError):
        registry.remove_beacon(42)
    with pytest.raises(UnknownBeaconError):
        registry.rename_beacon(42, "x")


def test_editing_lock_blocks_commands() -> None:
    registry = BeaconRegistry()
    registry.set_editing(False)

    for command in (
        lambda: registry.add_beacon(mac="ZZ"),
        lambda: registry.move_beacon(1, 0, 0),
        lambda: registry.rename_beacon(1, "x"),
        lambda: registry.remove_beacon(1),
    ):
        with pytest.raises(RegistryLockedError):
            command()

    registry.set_editing(True)
    assert registry.move_beacon(1, 0, 0).x == 0.0


def test_seed_with_duplicate_mac_rejected() -> None:
    with pytest.raises(DuplicateBeaconError):
        BeaconRegistry(
            [
                {"id": 1, "name": "A", "mac": "M1", "x": 0, "y": 0},
                {"id": 2, "name": "B", "mac": "m1", "x": 0, "y": 0},
            ]
        )


def test_snapshot_is_immutable_view() -> None:
    registry = BeaconRegistry()
    snapshot = registry.snapshot()

    registry.remove_beacon(1)

    assert len(snapshot) == 3
    assert len(registry.snapshot()) == 2
