from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import yaml

from . import telegrams
from .protocol import FieldOverflowError


@dataclass
class SerialConfig:
    # Line settings are fixed at 1200 7E2, only the device is configurable
    port: str = "/dev/ttyUSB0"


@dataclass
class TelegramConfig:
    id: str
    args: list[Any] = field(default_factory=list)


@dataclass
class AppConfig:
    interval: float = 0.0
    debug: bool = False
    serial: SerialConfig = field(default_factory=SerialConfig)
    telegrams: List[TelegramConfig] = field(default_factory=list)


def _as_float(val: Any, default: float) -> float:
    try:
        return float(val)
    except Exception:
        return default


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data or {}


def load_config(path: str | Path) -> AppConfig:
    p = Path(path)
    data = _load_yaml(p)

    serial_raw = data.get("serial", {}) or {}
    serial = SerialConfig(port=str(serial_raw.get("port", SerialConfig.port)))

    interval = _as_float(data.get("interval", 0.0), 0.0)
    debug = bool(data.get("debug", False))

    items: list[TelegramConfig] = []
    for item in data.get("telegrams", []) or []:
        if not isinstance(item, dict):
            continue
        tid = str(item.get("id", "")).strip()
        if not tid:
            continue
        args_raw = item.get("args")
        if args_raw is None:
            args: list[Any] = []
        elif isinstance(args_raw, list):
            args = list(args_raw)
        else:
            # single-argument shorthand: "args: 42"
            args = [args_raw]
        items.append(TelegramConfig(id=tid, args=args))

    return AppConfig(interval=interval, debug=debug, serial=serial, telegrams=items)


def validate_config(cfg: AppConfig) -> None:
    if cfg.interval < 0:
        raise ValueError("interval must be >= 0")
    if not cfg.serial.port:
        raise ValueError("serial.port must be a non-empty string")

    for i, t in enumerate(cfg.telegrams):
        if t.id not in telegrams.CATALOG:
            raise ValueError(f"telegrams[{i}]: unknown telegram '{t.id}'")
        spec = telegrams.CATALOG[t.id]
        try:
            spec.encode(*spec.coerce(t.args))
        except FieldOverflowError as e:
            raise ValueError(f"telegrams[{i}] '{t.id}': {e}") from e
        except (TypeError, ValueError) as e:
            raise ValueError(f"telegrams[{i}] '{t.id}': invalid arguments: {e}") from e


def load_and_validate_config(path: str | Path) -> AppConfig:
    cfg = load_config(path)
    validate_config(cfg)
    return cfg
