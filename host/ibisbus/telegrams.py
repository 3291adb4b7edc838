"""IBIS telegram catalog.

Most telegrams are a fixed prefix followed by one zero-padded number or
one space-padded text, so they are described by a list of fields and
rendered by a single formatter. The block-structured telegrams (DS003a,
DS003c, DS021, DS021a, GSP) and the delay telegram DS010e have their own
encoders below.

All encoders return the raw payload; framing happens in
:func:`ibisbus.protocol.frame`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from math import ceil
from typing import Any, Callable, Union

from .protocol import FieldOverflowError, pad_blocks, to_hex

LF = "\n"


class UnknownTelegramError(KeyError):
    pass


@dataclass(frozen=True)
class Literal:
    text: str

    def render(self, _value: Any = None) -> str:
        return self.text


@dataclass(frozen=True)
class Number:
    """Zero-padded decimal number of a fixed width."""

    width: int

    def render(self, value: int) -> str:
        value = int(value)
        if value < 0 or len(str(value)) > self.width:
            raise FieldOverflowError(f"{value} does not fit {self.width} digit(s)")
        return f"{value:0{self.width}d}"


@dataclass(frozen=True)
class Text:
    """Left-justified text padded with spaces to a fixed width."""

    width: int

    def render(self, value: str) -> str:
        value = str(value)
        if len(value) > self.width:
            raise FieldOverflowError(f"text {value!r} longer than {self.width} chars")
        return value.ljust(self.width)


FieldSpec = Union[Literal, Number, Text]


def render_fields(fields: tuple[FieldSpec, ...], *args: Any) -> str:
    """Render a field list, consuming one argument per non-literal field."""
    wanted = sum(1 for f in fields if not isinstance(f, Literal))
    if len(args) != wanted:
        raise TypeError(f"expected {wanted} argument(s), got {len(args)}")
    values = iter(args)
    out: list[str] = []
    for f in fields:
        if isinstance(f, Literal):
            out.append(f.render())
        else:
            out.append(f.render(next(values)))
    return "".join(out)


def ds010e(sign: str, delay: int) -> str:
    """Delay in minutes, ``sign`` is ``+`` or ``-``."""
    if sign not in ("+", "-"):
        raise FieldOverflowError(f"delay sign must be '+' or '-', got {sign!r}")
    return "xV" + sign + Number(3).render(delay)


def ds003a(text: str) -> str:
    """Destination text in 16 character blocks."""
    num_blocks, padded = pad_blocks(text, 16)
    return "zA" + to_hex(num_blocks) + padded


def ds003c(text: str) -> str:
    """Next stop name in 4 character blocks."""
    num_blocks, padded = pad_blocks(text, 4)
    return "zI" + to_hex(num_blocks) + padded


def ds021(address: int, text: str) -> str:
    """Destination text for the display at ``address``.

    The block count is taken in units of 4 but the text is cut to
    ``blocks * 16`` characters, and nothing is padded. Displays in the
    field expect exactly this.
    """
    num_blocks = ceil(len(text) / 4)
    return "aA" + to_hex(address) + to_hex(num_blocks) + text[: num_blocks * 16]


def ds021a(address: int, stop_id: int, stop_text: str, change_text: str) -> str:
    """Line progress display record.

    Unlike the other block telegrams this one states the length of the
    partial last block explicitly instead of padding it.
    """
    data = "\x03" + Number(2).render(stop_id) + "\x04" + stop_text + "\x05" + change_text
    num_blocks = ceil(len(data) / 4)
    remainder = len(data) % 4
    return "aL" + to_hex(address) + to_hex(num_blocks) + to_hex(remainder) + data


def gsp(address: int, line1: str, line2: str) -> str:
    """General screen page with up to two lines of text."""
    lines = line1
    if line2:
        lines += LF
    lines += line2 + LF + LF
    num_blocks, padded = pad_blocks(lines, 16)
    return "aA" + to_hex(address) + to_hex(num_blocks) + padded


@dataclass(frozen=True)
class TelegramSpec:
    id: str
    description: str
    encoder: Callable[..., str]
    arg_types: tuple[type, ...] = field(default=())

    def encode(self, *args: Any) -> str:
        if len(args) != len(self.arg_types):
            raise TypeError(
                f"{self.id} takes {len(self.arg_types)} argument(s), got {len(args)}"
            )
        return self.encoder(*args)

    def coerce(self, raw_args: list[Any]) -> tuple[Any, ...]:
        """Convert CLI/config values to the encoder's argument types."""
        if len(raw_args) != len(self.arg_types):
            raise ValueError(
                f"{self.id} takes {len(self.arg_types)} argument(s), got {len(raw_args)}"
            )
        return tuple(t(v) for t, v in zip(self.arg_types, raw_args))


# id, description, fields
_SIMPLE: list[tuple[str, str, tuple[FieldSpec, ...]]] = [
    ("DS001", "Line number", (Literal("l"), Number(3))),
    ("DS001neu", "Line number, alphanumeric", (Literal("q"), Number(4))),
    ("DS001a", "Line number symbol", (Literal("lE"), Number(2))),
    ("DS001b", "Radio", (Literal("lF"), Number(5))),
    ("DS001c", "Line tape reel position", (Literal("lP"), Number(3))),
    ("DS001d", "Line number, 4 chars", (Literal("lC"), Number(4))),
    ("DS001e", "Line number, 8 chars", (Literal("lC"), Number(8))),
    ("DS001f", "Line number, 7 chars", (Literal("lC"), Number(7))),
    ("DS002", "Course number", (Literal("k"), Number(2))),
    ("DS002a", "Train number", (Literal("k"), Number(5))),
    ("DS003", "Destination text id", (Literal("z"), Number(3))),
    ("DS003b", "Destination id for IMU", (Literal("zR"), Number(3))),
    ("DS003d", "Route number", (Literal("zN"), Number(3))),
    ("DS003e", "Destination tape reel position", (Literal("zP"), Number(3))),
    ("DS003f", "Route number, 6 digits", (Literal("zN"), Number(6))),
    ("DS003g", "Line number", (Literal("zL"), Number(4))),
    ("DS004", "Ticket validator attributes", (Literal("e"), Number(6))),
    ("DS004a", "Additional ticket validator attributes", (Literal("eA"), Number(4))),
    ("DS004b", "Ticket validator stop number", (Literal("eH"), Number(7))),
    ("DS005", "Time, HHMM", (Literal("u"), Number(4))),
    ("DS006", "Date, DDMMY", (Literal("d"), Number(5))),
    ("DS007", "Train length", (Literal("w"), Number(1))),
    ("DS009", "Next stop text, 16 chars", (Literal("v"), Text(16))),
    ("DS009a", "Next stop text, 20 chars", (Literal("v"), Text(20))),
    ("DS009b", "Next stop text, 24 chars", (Literal("v"), Text(24))),
    ("DS010", "Line progress stop id", (Literal("x"), Number(4))),
    ("DS010a", "Line progress stop id", (Literal("xH"), Number(4))),
    ("DS010b", "Line progress stop id, 2 digits", (Literal("xI"), Number(2))),
    ("DS010d", "Year, YYYY", (Literal("xJ"), Number(4))),
]


def _arg_type(f: FieldSpec) -> type:
    return str if isinstance(f, Text) else int


CATALOG: dict[str, TelegramSpec] = {
    tid: TelegramSpec(
        id=tid,
        description=desc,
        encoder=partial(render_fields, fields),
        arg_types=tuple(_arg_type(f) for f in fields if not isinstance(f, Literal)),
    )
    for tid, desc, fields in _SIMPLE
}
CATALOG.update(
    {
        "DS010e": TelegramSpec("DS010e", "Delay, sign and minutes", ds010e, (str, int)),
        "DS003a": TelegramSpec("DS003a", "Destination text", ds003a, (str,)),
        "DS003c": TelegramSpec("DS003c", "Next stop name", ds003c, (str,)),
        "DS021": TelegramSpec("DS021", "Addressed destination text", ds021, (int, str)),
        "DS021a": TelegramSpec(
            "DS021a", "Line progress display text", ds021a, (int, int, str, str)
        ),
        "GSP": TelegramSpec("GSP", "General screen page", gsp, (int, str, str)),
    }
)


def get(telegram_id: str) -> TelegramSpec:
    try:
        return CATALOG[telegram_id]
    except KeyError:
        raise UnknownTelegramError(telegram_id) from None


def encode(telegram_id: str, *args: Any) -> str:
    """Build the raw (unframed) payload of a telegram."""
    return get(telegram_id).encode(*args)
