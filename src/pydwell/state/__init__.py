"""State layer.

This package is the single source of truth for how decoded gateway telemetry
is merged into per-vehicle position and dwell history.
"""
