from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Optional

from .transport import IbisPort, SerialBus


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Feed time and date telegrams to IBIS displays")
    p.add_argument("--port", default="/dev/ttyUSB0", help="Serial port (default: /dev/ttyUSB0)")
    p.add_argument(
        "--interval",
        type=float,
        default=30.0,
        help="Seconds between updates (default: 30)",
    )
    p.add_argument("--debug", action="store_true", help="Log every frame sent as hex")
    return p.parse_args(argv)


def clock_values(now: Optional[time.struct_time] = None) -> tuple[int, int]:
    """Return (HHMM, DDMMY) for DS005 and DS006."""
    t = now or time.localtime()
    hhmm = t.tm_hour * 100 + t.tm_min
    # DS006 only carries the last digit of the year
    ddmmy = t.tm_mday * 1000 + t.tm_mon * 10 + t.tm_year % 10
    return hhmm, ddmmy


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.debug else logging.ERROR,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )
    port = IbisPort(SerialBus(args.port))
    port.set_debug(args.debug)
    if not port.begin():
        print(f"Failed to open serial port {args.port}", file=sys.stderr)
        return 2

    try:
        while True:
            hhmm, ddmmy = clock_values()
            port.send("DS005", hhmm)
            port.send("DS006", ddmmy)
            time.sleep(args.interval)
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        return 0
    finally:
        port.end()


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
