"""Unit tests for demo_library.byte_cursor."""
from __future__ import annotations

import struct

import pytest

from demo_library.byte_cursor import ByteCursor
from demo_library.exceptions import OutOfBoundsRead


def test_reads_little_endian_values_in_order() -> None:
    data = struct.pack("<i", -7) + struct.pack("<f", 1.5) + b"abc\0\0"
    cursor = ByteCursor(data)
    assert cursor.read_int() == -7
    assert cursor.read_float() == 1.5
    assert cursor.read_string(5) == "abc"
    assert cursor.remaining == 0
    assert cursor.position == len(data)


def test_fixed_string_stops_at_first_nul_but_consumes_whole_field() -> None:
    cursor = ByteCursor(b"map\0junk" + b"\x2a\x00\x00\x00")
    assert cursor.read_string(8) == "map"
    assert cursor.position == 8
    assert cursor.read_int() == 42


def test_fixed_string_without_nul_uses_all_bytes() -> None:
    cursor = ByteCursor(b"HL2DEMOX")
    assert cursor.read_string(8) == "HL2DEMOX"


def test_read_past_end_raises_and_does_not_move() -> None:
    cursor = ByteCursor(b"\x01\x02\x03")
    with pytest.raises(OutOfBoundsRead):
        cursor.read_int()
    assert cursor.position == 0
    assert cursor.read_bytes(3) == b"\x01\x02\x03"


def test_out_of_bounds_is_an_eof_error() -> None:
    cursor = ByteCursor(b"")
    with pytest.raises(EOFError):
        cursor.read_float()


def test_negative_size_is_rejected() -> None:
    cursor = ByteCursor(b"abcd")
    with pytest.raises(OutOfBoundsRead):
        cursor.read_bytes(-1)
    assert cursor.position == 0
