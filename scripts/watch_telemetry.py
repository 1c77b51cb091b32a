#!/usr/bin/env python3
"""Console observer for the dashboard telemetry API.

Polls ``/api/v1/can/latest`` and ``/api/v1/can/status`` through pyecocar and
prints one line per change event or fetch failure, which is handy for
checking a test bench without starting the dashboard UI.

Connection settings come from ``ECOCAR_*`` environment variables and can be
overridden on the command line.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyecocar import ChangeEvent, EcoCarClient, EcoCarConfig, EcoCarConfigError, FieldId  # noqa: E402

_UNITS: dict[FieldId, str] = {
    FieldId.SPEED: "km/h",
    FieldId.BATTERY_VOLTAGE: "V",
    FieldId.MOTOR_TEMP: "°C",
}


def _format_event(event: ChangeEvent) -> str:
    stamp = event.observed_at.strftime("%H:%M:%S.%f")[:-3]
    if event.field == FieldId.CONNECTION_STATUS:
        return f"{stamp}  connection   {'UP' if event.new_value else 'DOWN'}"
    return f"{stamp}  {event.field.value:<15}{event.new_value:>10.2f} {_UNITS.get(event.field, '')}"


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--host", help="API host (default: ECOCAR_HOST or localhost)")
    parser.add_argument("--port", type=int, help="API port (default: ECOCAR_PORT or 5000)")
    parser.add_argument("--interval", type=float, help="Polling interval in seconds")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--duration", type=float, default=0.0, help="Stop after N seconds (0 = run until Ctrl+C)")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and print the snapshot")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.interval is not None:
        overrides["poll_interval"] = args.interval
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout

    try:
        config = EcoCarConfig.from_env(**overrides)
    except EcoCarConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    def on_change(event: ChangeEvent) -> None:
        print(_format_event(event), flush=True)

    def on_error(message: str) -> None:
        print(f"error: {message}", file=sys.stderr, flush=True)

    print(f"Polling {config.base_url} every {config.poll_interval:.3f}s", file=sys.stderr)

    async with EcoCarClient(config, on_change=on_change, on_error=on_error) as client:
        if args.once:
            await client.poll_once()
            print(client.snapshot.model_dump_json(indent=2))
            return 0

        client.start()
        try:
            if args.duration > 0:
                await asyncio.sleep(args.duration)
            else:
                await asyncio.Event().wait()
        finally:
            await client.stop()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
