"""Ingestion layer.

This package contains adapters that decode telemetry received from BLE
gateways (WebSocket, MQTT) and emit typed telemetry events.
"""

__all__: list[str] = []
