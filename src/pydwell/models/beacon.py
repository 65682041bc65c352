"""Beacon model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from pydwell.ingestion.normalize import normalize_mac


class Position(BaseModel):
    """A point on the plan, in the same units as beacon coordinates."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    x: float
    y: float


class Beacon(BaseModel):
    """A stationary BLE beacon placed on the plan.

    Instances are immutable; the registry replaces a beacon with an
    updated copy when an operator moves or renames it.

    Parameters
    ----------
    id : int
        Registry-assigned identifier.
    name : str
        Display name.
    mac : str
        Normalized MAC address (upper-case hex, no separators). Empty for a
        placeholder beacon that has not been wired to hardware yet.
    x : float
        Horizontal plan coordinate.
    y : float
        Vertical plan coordinate.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    id: int
    name: str
    mac: str = ""
    x: float = 0.0
    y: float = 0.0

    @field_validator("mac", mode="before")
    @classmethod
    def _normalize_mac(cls, value: Any) -> str:
        return normalize_mac(value)

    @property
    def position(self) -> Position:
        return Position(x=self.x, y=self.y)

    def moved_to(self, x: float, y: float) -> Beacon:
        return self.model_copy(update={"x": float(x), "y": float(y)})

