from __future__ import annotations

import pytest

from ibisbus import telegrams
from ibisbus.protocol import FieldOverflowError
from ibisbus.telegrams import (
    CATALOG,
    Literal,
    Number,
    Text,
    UnknownTelegramError,
    ds003a,
    ds003c,
    ds010e,
    ds021,
    ds021a,
    encode,
    gsp,
    render_fields,
)


@pytest.mark.parametrize(
    "tid,args,expected",
    [
        ("DS001", (42,), "l042"),
        ("DS001neu", (7,), "q0007"),
        ("DS001a", (3,), "lE03"),
        ("DS001b", (12,), "lF00012"),
        ("DS001c", (1,), "lP001"),
        ("DS001d", (123,), "lC0123"),
        ("DS001e", (9,), "lC00000009"),
        ("DS001f", (9,), "lC0000009"),
        ("DS002", (5,), "k05"),
        ("DS002a", (4711,), "k04711"),
        ("DS003", (17,), "z017"),
        ("DS003b", (17,), "zR017"),
        ("DS003d", (17,), "zN017"),
        ("DS003e", (17,), "zP017"),
        ("DS003f", (17,), "zN000017"),
        ("DS003g", (17,), "zL0017"),
        ("DS004", (1,), "e000001"),
        ("DS004a", (1,), "eA0001"),
        ("DS004b", (1,), "eH0000001"),
        ("DS005", (930,), "u0930"),
        ("DS006", (18106,), "d18106"),
        ("DS007", (4,), "w4"),
        ("DS010", (12,), "x0012"),
        ("DS010a", (12,), "xH0012"),
        ("DS010b", (12,), "xI12"),
        ("DS010d", (2026,), "xJ2026"),
    ],
)
def test_fixed_number_telegrams(tid: str, args: tuple, expected: str) -> None:
    assert encode(tid, *args) == expected


def test_next_stop_text_widths() -> None:
    assert encode("DS009", "Rathaus") == "v" + "Rathaus".ljust(16)
    assert len(encode("DS009a", "Rathaus")) == 21
    assert len(encode("DS009b", "Rathaus")) == 25
    assert encode("DS009", "x" * 16) == "v" + "x" * 16


def test_number_overflow_raises() -> None:
    with pytest.raises(FieldOverflowError):
        encode("DS001", 1000)
    with pytest.raises(FieldOverflowError):
        encode("DS007", 10)
    with pytest.raises(FieldOverflowError):
        encode("DS005", -1)


def test_text_overflow_raises() -> None:
    with pytest.raises(FieldOverflowError):
        encode("DS009", "x" * 17)
    # the wider variant takes the same text
    assert encode("DS009a", "x" * 17).startswith("v" + "x" * 17)


def test_field_overflow_is_value_error() -> None:
    assert issubclass(FieldOverflowError, ValueError)


def test_render_fields_argument_count() -> None:
    fields = (Literal("l"), Number(3), Literal("/"), Text(4))
    assert render_fields(fields, 1, "ab") == "l001/ab  "
    with pytest.raises(TypeError):
        render_fields(fields, 1)
    with pytest.raises(TypeError):
        render_fields(fields, 1, "ab", None)


def test_unknown_telegram() -> None:
    with pytest.raises(UnknownTelegramError):
        encode("DS999", 1)
    with pytest.raises(KeyError):
        telegrams.get("nope")


def test_wrong_argument_count() -> None:
    with pytest.raises(TypeError):
        encode("DS001")
    with pytest.raises(TypeError):
        encode("DS021", 1)


def test_delay() -> None:
    assert ds010e("+", 5) == "xV+005"
    assert ds010e("-", 120) == "xV-120"
    with pytest.raises(FieldOverflowError):
        ds010e("*", 5)
    with pytest.raises(FieldOverflowError):
        ds010e("+", 1000)


def test_destination_text_16_blocks() -> None:
    assert ds003a("") == "zA0"
    assert ds003a("Hauptbahnhof") == "zA1Hauptbahnhof    "
    assert ds003a("x" * 16) == "zA1" + "x" * 16
    assert ds003a("x" * 20) == "zA2" + "x" * 20 + " " * 12


def test_destination_text_block_count_uses_hex_alphabet() -> None:
    raw = ds003a("x" * 16 * 10)
    assert raw.startswith("zA:")
    assert len(raw) == 3 + 160


def test_next_stop_name_4_blocks() -> None:
    assert ds003c("Test") == "zI1Test"
    assert ds003c("Hi") == "zI1Hi  "
    assert ds003c("") == "zI0"
    assert ds003c("Rathaus") == "zI2Rathaus "


def test_addressed_destination() -> None:
    assert ds021(5, "Hello World") == "aA53Hello World"
    # block count is ceil(len / 4), no padding is added
    assert ds021(16, "Rathaus") == "aA102Rathaus"
    assert ds021(0, "") == "aA00"


def test_addressed_destination_keeps_block_capacity() -> None:
    text = "y" * 48
    raw = ds021(1, text)
    # 12 blocks of 4 -> capacity 12 * 16, the whole text fits
    assert raw == "aA1<" + text


def test_addressed_destination_rejects_bad_address() -> None:
    with pytest.raises(FieldOverflowError):
        ds021(256, "x")


def test_line_progress_record() -> None:
    raw = ds021a(1, 7, "Bf", "U2")
    data = "\x0307\x04Bf\x05U2"
    assert len(data) == 9
    # 3 blocks, remainder 1
    assert raw == "aL131" + data


def test_line_progress_exact_multiple_has_zero_remainder() -> None:
    raw = ds021a(2, 1, "Ab", "Cdefg")
    data = "\x0301\x04Ab\x05Cdefg"
    assert len(data) == 12
    assert raw == "aL230" + data


def test_line_progress_stop_id_overflow() -> None:
    with pytest.raises(FieldOverflowError):
        ds021a(1, 100, "Bf", "")


def test_screen_page_two_lines() -> None:
    lines = "Hauptbahnhof\nGleis 3\n\n"
    assert len(lines) == 22
    assert gsp(1, "Hauptbahnhof", "Gleis 3") == "aA12" + lines + " " * 10


def test_screen_page_single_line_has_no_separator() -> None:
    assert gsp(2, "Ende", "") == "aA21Ende\n\n" + " " * 10


def test_catalog_covers_every_encoder() -> None:
    for tid in ("DS010e", "DS003a", "DS003c", "DS021", "DS021a", "GSP"):
        assert tid in CATALOG
    assert CATALOG["GSP"].arg_types == (int, str, str)
    assert CATALOG["DS009"].arg_types == (str,)
    assert CATALOG["DS001"].arg_types == (int,)


def test_coerce_from_strings() -> None:
    spec = CATALOG["DS021"]
    assert spec.coerce(["5", "Hello"]) == (5, "Hello")
    with pytest.raises(ValueError):
        spec.coerce(["5"])
    with pytest.raises(ValueError):
        spec.coerce(["five", "Hello"])
