"""Beacon registry.

The registry is the command interface operators (or a UI) use to place
beacons on the plan. The tracker only reads it, fresh on every report, so
edits take effect on the next telemetry message without reconnecting the
feed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from pydwell._constants import BEACON_NAME_TEMPLATE, DEFAULT_BEACONS, DEFAULT_NEW_BEACON_POSITION
from pydwell.exceptions import DuplicateBeaconError, RegistryLockedError, UnknownBeaconError
from pydwell.ingestion.normalize import normalize_mac
from pydwell.models.beacon import Beacon

_logger = logging.getLogger(__name__)


class BeaconRegistry:
    """Mutable collection of beacons keyed by id, unique by MAC.

    Usage::

        registry = BeaconRegistry()
        dock = registry.add_beacon(name="Dock", mac="C3:00:00:22:67:E9", x=50, y=80)
        registry.move_beacon(dock.id, 60, 80)

    Beacon ids come from a counter that only moves forward, so removing a
    beacon never frees its id for reuse.
    """

    def __init__(
        self,
        beacons: Iterable[Beacon | Mapping[str, Any]] | None = None,
        *,
        default_position: tuple[float, float] = DEFAULT_NEW_BEACON_POSITION,
    ) -> None:
        self._beacons: dict[int, Beacon] = {}
        self._default_position = default_position
        self._next_id = 1
        self._editing = True

        seed = DEFAULT_BEACONS if beacons is None else beacons
        for item in seed:
            beacon = item if isinstance(item, Beacon) else Beacon.model_validate(item)
            self._insert(beacon)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Beacon]:
        return iter(tuple(self._beacons.values()))

    def __len__(self) -> int:
        return len(self._beacons)

    def __contains__(self, beacon_id: object) -> bool:
        return beacon_id in self._beacons

    @property
    def editing(self) -> bool:
        """Whether mutating commands are currently accepted."""
        return self._editing

    def snapshot(self) -> tuple[Beacon, ...]:
        """Immutable view of the current beacons in id order."""
        return tuple(self._beacons.values())

    def get(self, beacon_id: int) -> Beacon | None:
        return self._beacons.get(beacon_id)

    def find_by_mac(self, mac: str) -> Beacon | None:
        normalized = normalize_mac(mac)
        if not normalized:
            return None
        for beacon in self._beacons.values():
            if beacon.mac == normalized:
                return beacon
        return None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_editing(self, enabled: bool) -> None:
        """Enable or disable all mutating commands."""
        self._editing = bool(enabled)

    def add_beacon(
        self,
        name: str | None = None,
        mac: str = "",
        x: float | None = None,
        y: float | None = None,
    ) -> Beacon:
        """Register a new beacon and return it.

        ``name`` defaults to ``"Beacon <id>"`` and the position to the
        registry's ``default_position``. An empty ``mac`` registers a
        placeholder that no telemetry can resolve to.
        """
        self._require_editing()
        beacon_id = self._next_id
        default_x, default_y = self._default_position
        beacon = Beacon(
            id=beacon_id,
            name=name or BEACON_NAME_TEMPLATE.format(id=beacon_id),
            mac=mac,
            x=default_x if x is None else x,
            y=default_y if y is None else y,
        )
        self._insert(beacon)
        _logger.debug("Beacon added id=%s name=%s mac=%s", beacon.id, beacon.name, beacon.mac)
        return beacon

    def move_beacon(self, beacon_id: int, x: float, y: float) -> Beacon:
        """Reposition a beacon. Past dwell history is not affected."""
        self._require_editing()
        beacon = self._require(beacon_id).moved_to(x, y)
        self._beacons[beacon_id] = beacon
        return beacon

    def rename_beacon(self, beacon_id: int, name: str) -> Beacon:
        self._require_editing()
        beacon = self._require(beacon_id).model_copy(update={"name": name})
        self._beacons[beacon_id] = beacon
        return beacon

    def remove_beacon(self, beacon_id: int) -> Beacon:
        """Unregister a beacon and return it.

        Vehicles currently assigned to it keep their assignment until the
        next report resolves elsewhere.
        """
        self._require_editing()
        beacon = self._require(beacon_id)
        del self._beacons[beacon_id]
        _logger.debug("Beacon removed id=%s mac=%s", beacon.id, beacon.mac)
        return beacon

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _insert(self, beacon: Beacon) -> None:
        if beacon.id in self._beacons:
            raise DuplicateBeaconError(f"Beacon id {beacon.id} is already registered")
        if beacon.mac and self.find_by_mac(beacon.mac) is not None:
            raise DuplicateBeaconError(f"MAC {beacon.mac} is already registered", mac=beacon.mac)
        self._beacons[beacon.id] = beacon
        self._next_id = max(self._next_id, beacon.id + 1)

    def _require(self, beacon_id: int) -> Beacon:
        beacon = self._beacons.get(beacon_id)
        if beacon is None:
            raise UnknownBeaconError(f"No beacon with id {beacon_id}", beacon_id=beacon_id)
        return beacon

    def _require_editing(self) -> None:
        if not self._editing:
            raise RegistryLockedError("Beacon editing is disabled")
