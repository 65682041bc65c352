"""Read-only projections for presentation layers.

Nothing here mutates tracker or registry state; these helpers only shape
snapshots into rows a table or canvas can draw.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import NamedTuple

from pydwell._constants import MISSING_VALUE
from pydwell.models.beacon import Beacon
from pydwell.models.vehicle import DwellRecord, Vehicle

HISTORY_COLUMNS: tuple[str, ...] = ("beacon", "entry", "exit", "duration_s")


class Marker(NamedTuple):
    """Something to draw on the plan."""

    kind: str
    label: str
    x: float
    y: float


def _format_time(value: datetime | None) -> str:
    return value.isoformat() if value is not None else MISSING_VALUE


def history_row(record: DwellRecord) -> dict[str, str]:
    return {
        "beacon": record.beacon_name,
        "entry": _format_time(record.entry_time),
        "exit": _format_time(record.exit_time),
        "duration_s": MISSING_VALUE if record.duration_seconds is None else str(record.duration_seconds),
    }


def history_rows(vehicle: Vehicle) -> list[dict[str, str]]:
    """One row per dwell record, oldest first; open fields shown as ``-``."""
    return [history_row(record) for record in vehicle.history]


def markers(beacons: Iterable[Beacon], vehicles: Iterable[Vehicle]) -> list[Marker]:
    """Beacon markers followed by markers for vehicles with a known position."""
    result = [Marker("beacon", beacon.name, beacon.x, beacon.y) for beacon in beacons]
    for vehicle in vehicles:
        if vehicle.position is None:
            continue
        result.append(Marker("vehicle", vehicle.name, vehicle.position.x, vehicle.position.y))
    return result


def render_table(columns: Sequence[str], rows: Sequence[dict[str, str]]) -> str:
    """Plain-text table, used by the probe script and debug logs."""
    widths = [len(col) for col in columns]
    for row in rows:
        for idx, col in enumerate(columns):
            widths[idx] = max(widths[idx], len(row.get(col, "")))
    lines = ["  ".join(col.ljust(widths[idx]) for idx, col in enumerate(columns))]
    lines.append("  ".join("-" * width for width in widths))
    for row in rows:
        lines.append("  ".join(row.get(col, "").ljust(widths[idx]) for idx, col in enumerate(columns)).rstrip())
    return "\n".join(lines)
