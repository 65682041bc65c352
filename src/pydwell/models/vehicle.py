"""Vehicle and dwell history models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from pydwell.ingestion.normalize import round_half_up
from pydwell.models.beacon import Beacon, Position


class DwellRecord(BaseModel):
    """One contiguous interval a vehicle spent at the same beacon.

    ``exit_time`` and ``duration_seconds`` are ``None`` while the interval is
    open and are set together by :meth:`close`. Records are immutable;
    closing returns a new record.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    beacon_id: int
    beacon_name: str
    entry_time: datetime
    exit_time: datetime | None = None
    duration_seconds: int | None = None

    @property
    def is_open(self) -> bool:
        return self.exit_time is None

    @classmethod
    def open_at(cls, beacon: Beacon, now: datetime) -> DwellRecord:
        return cls(beacon_id=beacon.id, beacon_name=beacon.name, entry_time=now)

    def close(self, now: datetime) -> DwellRecord:
        """Return a closed copy of this record ending at *now*."""
        if not self.is_open:
            raise ValueError("dwell record is already closed")
        elapsed = (now - self.entry_time).total_seconds()
        return self.model_copy(update={"exit_time": now, "duration_seconds": round_half_up(elapsed)})


class Vehicle(BaseModel):
    """A tracked gateway and its dwell history.

    Owned by :class:`pydwell.state.tracker.DwellTracker`; readers get deep
    copies, so mutating a returned instance has no effect on tracking.
    """

    model_config = ConfigDict(extra="forbid")

    id: int
    name: str
    gateway_id: str
    current_beacon: Beacon | None = None
    position: Position | None = None
    history: list[DwellRecord] = Field(default_factory=list)
    last_seen: datetime | None = None
    """Processing time of the last resolvable report."""
    last_rssi: float | None = None
    """Signal strength of the dominant advertisement in the last report."""

    @property
    def open_record(self) -> DwellRecord | None:
        if self.history and self.history[-1].is_open:
            return self.history[-1]
        return None
