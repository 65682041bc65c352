"""Normalization helpers.

Centralizes defensive parsing of gateway payload fields.
"""

from __future__ import annotations

import math
from typing import Any

_MAC_SEPARATORS = str.maketrans("", "", ":-. ")


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def normalize_mac(value: Any) -> str:
    """Return *value* as a bare upper-case hex MAC (``"C300002267E5"``).

    Gateways and operators disagree on separators and case; the registry
    and tracker compare MACs in this form only. Non-string input yields
    an empty string, which never matches a beacon.
    """
    if not isinstance(value, str):
        return ""
    return value.translate(_MAC_SEPARATORS).upper()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return math.floor(value + 0.5)
