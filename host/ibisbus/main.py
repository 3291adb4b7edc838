from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Tuple

from . import telegrams
from .config import AppConfig, load_and_validate_config
from .protocol import frame
from .transport import IbisPort, SerialBus, hex_dump


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Send IBIS telegrams to onboard displays")
    p.add_argument("--config", default=None, help="Path to YAML config with a telegram list")
    p.add_argument("--port", default=None, help="Serial device, overrides serial.port")
    p.add_argument("--dry-run", action="store_true", help="Print frames as hex instead of sending")
    p.add_argument("--once", action="store_true", help="Send the list once even if interval is set")
    p.add_argument("--list", action="store_true", help="List known telegrams and exit")
    p.add_argument(
        "--verbose",
        action="store_true",
        help="Enable INFO-level logging (default is ERROR)",
    )
    p.add_argument("--debug", action="store_true", help="Log every frame sent as hex")
    p.add_argument("telegram", nargs="?", help="Telegram id to send, e.g. DS001")
    # everything after the telegram id is an argument, even "-Ende"
    p.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Telegram arguments (options must come before the telegram id)",
    )
    return p.parse_args(argv)


def _encode_config(cfg: AppConfig) -> List[Tuple[str, str]]:
    out: list[tuple[str, str]] = []
    for t in cfg.telegrams:
        spec = telegrams.get(t.id)
        out.append((t.id, spec.encode(*spec.coerce(t.args))))
    return out


def _print_catalog() -> None:
    for tid, spec in telegrams.CATALOG.items():
        types = " ".join(t.__name__ for t in spec.arg_types)
        print(f"{tid:<9} {types:<20} {spec.description}")


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    lvl = logging.INFO if (args.verbose or args.debug) else logging.ERROR
    logging.basicConfig(level=lvl, format="%(levelname)s:%(name)s:%(message)s", stream=sys.stderr)
    log = logging.getLogger(__name__)

    if args.list:
        _print_catalog()
        return 0

    cfg = AppConfig()
    if args.config:
        try:
            cfg = load_and_validate_config(args.config)
        except Exception as e:
            log.error("Failed to load config: %s", e)
            return 2
    if args.port:
        cfg.serial.port = args.port
    if cfg.debug:
        # frame dumps are logged at INFO
        logging.getLogger().setLevel(logging.INFO)

    repeat = False
    if args.telegram:
        try:
            spec = telegrams.get(args.telegram)
            jobs = [(spec.id, spec.encode(*spec.coerce(args.args)))]
        except (KeyError, TypeError, ValueError) as e:
            log.error("Invalid telegram %s: %s", args.telegram, e)
            return 2
    else:
        if not cfg.telegrams:
            log.error("Nothing to send: give a telegram or a config with telegrams")
            return 2
        jobs = _encode_config(cfg)
        repeat = cfg.interval > 0 and not args.once

    if args.dry_run:
        for tid, raw in jobs:
            print(f"{tid} {hex_dump(frame(raw))}")
        return 0

    port = IbisPort(SerialBus(cfg.serial.port))
    port.set_debug(cfg.debug or args.debug)

    backoff = 5.0
    warned = False
    while not port.begin():
        if not repeat:
            return 3
        if not warned:
            log.warning("Serial port unavailable (%s), retrying", cfg.serial.port)
            warned = True
        try:
            time.sleep(backoff)
        except KeyboardInterrupt:
            return 3
        backoff = min(backoff * 2.0, 30.0)
    if warned:
        log.info("Opened serial port %s", cfg.serial.port)

    try:
        while True:
            for _tid, raw in jobs:
                port.send_raw(raw)
            log.info("sent %d telegram(s)", len(jobs))
            if not repeat:
                return 0
            time.sleep(cfg.interval)
    except KeyboardInterrupt:
        return 0
    finally:
        port.end()


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
