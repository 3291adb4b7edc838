from __future__ import annotations

from math import ceil

# VDV 300 encodes hex digits 10..15 as ":;<=>?" instead of "A".."F"
HEX_ALPHABET = "0123456789:;<=>?"

CR = "\r"
CHECKSUM_SEED = 0x7F

# German umlauts replace a few never-used ASCII symbols on the bus
CHARSET_MAP = {
    "ä": "{",
    "ö": "|",
    "ü": "}",
    "ß": "~",
    "Ä": "[",
    "Ö": "\\",
    "Ü": "]",
}
_CHARSET_TABLE = str.maketrans(CHARSET_MAP)


class FieldOverflowError(ValueError):
    """A value does not fit the fixed field it is encoded into."""


def to_hex(value: int) -> str:
    """Encode 0..255 with the bus hex alphabet, without a leading zero nibble.

    ``to_hex(0) == "0"``, ``to_hex(16) == "10"``, ``to_hex(255) == "??"``.
    """
    if not 0 <= value <= 0xFF:
        raise FieldOverflowError(f"hex value must be 0-255, got {value}")
    high = value >> 4
    low = value & 0x0F
    if high:
        return HEX_ALPHABET[high] + HEX_ALPHABET[low]
    return HEX_ALPHABET[low]


def remap_charset(text: str) -> str:
    return text.translate(_CHARSET_TABLE)


def pad_blocks(text: str, block_size: int) -> tuple[int, str]:
    """Return (number of blocks, text padded with spaces to whole blocks).

    Empty text stays empty and counts as zero blocks.
    """
    num_blocks = ceil(len(text) / block_size)
    remainder = len(text) % block_size
    if remainder:
        text = text + " " * (block_size - remainder)
    return num_blocks, text


def checksum(data: bytes, seed: int = CHECKSUM_SEED) -> int:
    value = seed
    for b in data:
        value ^= b
    return value


def frame(raw: str) -> bytes:
    """Wrap a raw telegram payload into the bytes sent on the wire.

    Layout: remapped payload, CR, then the XOR checksum over both.
    """
    # 1:1 replacement keeps lengths computed on the pre-remap text valid
    body = (remap_charset(raw) + CR).encode("ascii", errors="replace")
    return body + bytes([checksum(body)])


def verify(data: bytes) -> bool:
    """True when the frame passes the receiver's XOR self-check."""
    return len(data) >= 2 and data[-2:-1] == CR.encode() and checksum(data) == 0
