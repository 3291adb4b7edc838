from __future__ import annotations

# Ensure imports like `from ibisbus...` resolve without an installed package.
# Adds the project "host" directory to sys.path.
import sys
from pathlib import Path
from typing import Any

import pytest

PROJECT_DIR = Path(__file__).resolve().parents[1]
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))


class FakeSerial:
    instances: list["FakeSerial"] = []

    def __init__(self, port: str, baudrate: int, **kwargs: Any) -> None:
        self.port = port
        self.baudrate = baudrate
        self.kwargs = kwargs
        self.writes: list[bytes] = []
        self.closed = False
        FakeSerial.instances.append(self)

    def write(self, b: bytes) -> int:
        self.writes.append(b)
        return len(b)

    def flush(self) -> None:  # pragma: no cover - trivial
        return None

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_serial():
    FakeSerial.instances = []
    yield FakeSerial
    FakeSerial.instances = []
