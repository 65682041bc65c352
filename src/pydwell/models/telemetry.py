"""Gateway telemetry models."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, ValidationError, field_validator

from pydwell.ingestion.normalize import normalize_mac, safe_float, safe_str
from pydwell.models._base import DwellBaseModel


class Observation(DwellBaseModel):
    """One beacon advertisement heard by a gateway.

    Only ``mac`` and ``rssi`` are consumed; everything else the gateway
    reports (``uuid``, ``major``, ``minor``, ``txpower``...) stays in ``raw``.
    """

    mac: str
    """Normalized beacon MAC address."""
    rssi: float
    """Received signal strength in dBm. Greater (less negative) is stronger."""

    @field_validator("mac", mode="before")
    @classmethod
    def _normalize_mac(cls, value: Any) -> str:
        mac = normalize_mac(value)
        if not mac:
            raise ValueError("mac must be a non-empty string")
        return mac

    @field_validator("rssi", mode="before")
    @classmethod
    def _coerce_rssi(cls, value: Any) -> float:
        rssi = safe_float(value)
        if rssi is None:
            raise ValueError("rssi must be numeric")
        return rssi


class TelemetryEvent(DwellBaseModel):
    """A decoded gateway report: ``{"gw": ..., "tm": ..., "adv": [...]}``.

    Malformed entries in ``adv`` are dropped individually so one garbled
    advertisement does not discard the rest of the report.
    """

    gateway_id: str = Field(..., validation_alias=AliasChoices("gw", "gateway_id", "gatewayId"))
    """Reporting gateway; identifies the tracked vehicle."""
    timestamp: str | None = Field(default=None, validation_alias=AliasChoices("tm", "timestamp"))
    """Source timestamp as sent by the gateway. Informational only."""
    observations: list[Observation] = Field(
        default_factory=list,
        validation_alias=AliasChoices("adv", "observations"),
    )
    """Beacon advertisements in gateway order."""

    @field_validator("gateway_id", mode="before")
    @classmethod
    def _coerce_gateway_id(cls, value: Any) -> str:
        gateway_id = safe_str(value)
        if gateway_id is None:
            raise ValueError("gateway id must be non-empty")
        return gateway_id

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("observations", mode="before")
    @classmethod
    def _parse_observations(cls, value: Any) -> list[Observation]:
        if not isinstance(value, list):
            return []
        parsed: list[Observation] = []
        for item in value:
            if isinstance(item, Observation):
                parsed.append(item)
                continue
            try:
                parsed.append(Observation.model_validate(item))
            except ValidationError:
                continue
        return parsed
