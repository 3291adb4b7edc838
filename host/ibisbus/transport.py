from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

import serial

from . import telegrams
from .protocol import frame

log = logging.getLogger(__name__)

# IBIS Wagenbus line settings (1200 7E2), fixed by the protocol
BAUD = 1200
BYTESIZE = serial.SEVENBITS
PARITY = serial.PARITY_EVEN
STOPBITS = serial.STOPBITS_TWO


class BusTransport(Protocol):
    """Anything that can be opened, closed and fed frame bytes."""

    def open(self) -> None: ...

    def close(self) -> None: ...

    def write(self, data: bytes) -> None: ...


class SerialBus:
    """IBIS bus on a serial port (usually a USB-UART behind a level shifter)."""

    def __init__(self, port: str, factory: Callable[..., Any] = serial.Serial) -> None:
        self.port = port
        self._factory = factory
        self._ser: Optional[Any] = None

    @property
    def is_open(self) -> bool:
        return self._ser is not None

    def open(self) -> None:
        self._ser = self._factory(
            self.port,
            BAUD,
            bytesize=BYTESIZE,
            parity=PARITY,
            stopbits=STOPBITS,
            timeout=0.2,
        )

    def close(self) -> None:
        if self._ser is not None:
            try:
                self._ser.close()
            finally:
                self._ser = None

    def write(self, data: bytes) -> None:
        if self._ser is None:
            raise serial.PortNotOpenError()
        self._ser.write(data)
        self._ser.flush()


def hex_dump(data: bytes) -> str:
    return " ".join(f"{b:02X}" for b in data)


class IbisPort:
    """Sends IBIS telegrams through an injected bus transport.

    Usage::

        port = IbisPort(SerialBus("/dev/ttyUSB0"))
        if port.begin():
            port.send("DS001", 42)
            port.send("GSP", 1, "Hauptbahnhof", "Gleis 3")
            port.end()

    Sending while the port is not open drops the telegram.
    """

    def __init__(self, bus: BusTransport) -> None:
        self._bus = bus
        self._open = False
        self._debug = False

    @property
    def is_open(self) -> bool:
        return self._open

    def begin(self) -> bool:
        if self._open:
            log.error("cannot begin, port is already open")
            return False
        try:
            self._bus.open()
        except (serial.SerialException, OSError) as e:
            log.error("failed to open bus: %s", e)
            return False
        self._open = True
        return True

    def end(self) -> None:
        if not self._open:
            return
        try:
            self._bus.close()
        finally:
            self._open = False

    def set_debug(self, enable: bool) -> None:
        """Log every frame sent (length, checksum, hex dump) at INFO."""
        self._debug = enable

    def send(self, telegram_id: str, *args: Any) -> Optional[bytes]:
        """Encode, frame and send one catalog telegram.

        Returns the bytes written, or None if the port is not open or
        the write failed.
        Raises FieldOverflowError before sending when an argument does
        not fit its field.
        """
        return self.send_raw(telegrams.encode(telegram_id, *args))

    def send_raw(self, raw: str) -> Optional[bytes]:
        if not self._open:
            log.warning("cannot send, port is not open")
            return None
        data = frame(raw)
        if self._debug:
            log.info(
                "sending telegram length=%d checksum=0x%02X: %s",
                len(data),
                data[-1],
                hex_dump(data),
            )
        try:
            self._bus.write(data)
        except (serial.SerialException, OSError) as e:
            log.error("failed to write telegram: %s", e)
            return None
        return data
