#!/usr/bin/env python3
"""Live probe for a BLE gateway telemetry feed.

Connects to the WebSocket feed (and optionally MQTT) using pydwell's
client, then prints every dwell transition and, on exit, a history table
per vehicle.

Use this to check beacon MACs and placement before wiring a dashboard.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pydwell import BeaconRegistry, DwellClient, DwellConfig, IngestOutcome, Vehicle  # noqa: E402
from pydwell.views import HISTORY_COLUMNS, history_rows, render_table  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--url", help="WebSocket feed URL (default: DWELL_TELEMETRY_URL or built-in)")
    parser.add_argument("--mqtt-host", help="Also subscribe to this MQTT broker")
    parser.add_argument("--mqtt-topic", help="MQTT topic filter")
    parser.add_argument(
        "--beacons",
        type=Path,
        help="JSON file with a list of {id, name, mac, x, y} beacons (default: built-in demo beacons)",
    )
    parser.add_argument("--duration", type=float, default=0.0, help="Stop after N seconds (0 = until Ctrl+C)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args()


def _load_registry(path: Path | None) -> BeaconRegistry:
    if path is None:
        return BeaconRegistry()
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise SystemExit(f"{path} must contain a JSON list of beacons")
    return BeaconRegistry(data)


def _on_update(vehicle: Vehicle, outcome: IngestOutcome) -> None:
    if outcome == IngestOutcome.UPDATED:
        return
    beacon = vehicle.current_beacon.name if vehicle.current_beacon else "-"
    print(f"[probe] {vehicle.name} gw={vehicle.gateway_id} {outcome.value} -> {beacon} rssi={vehicle.last_rssi}")


def _print_summary(client: DwellClient) -> None:
    vehicles = client.vehicles()
    if not vehicles:
        print("[probe] No vehicles seen.")
        return
    for vehicle in vehicles:
        print(f"\n{vehicle.name} (gateway {vehicle.gateway_id})")
        print(render_table(HISTORY_COLUMNS, history_rows(vehicle)))


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.url:
        overrides["telemetry_url"] = args.url
    if args.mqtt_host:
        overrides["mqtt_enabled"] = True
        overrides["mqtt_host"] = args.mqtt_host
    if args.mqtt_topic:
        overrides["mqtt_topic"] = args.mqtt_topic
    config = DwellConfig.from_env(**overrides)

    async with DwellClient(config, registry=_load_registry(args.beacons), on_update=_on_update) as client:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, lambda: asyncio.ensure_future(client.stop()))

        print(f"[probe] Listening on {config.telemetry_url}")
        try:
            if args.duration > 0:
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(client.run(), timeout=args.duration)
            else:
                await client.run()
        finally:
            _print_summary(client)
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(_main())
