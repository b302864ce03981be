"""Unit tests for demo_library.demo_header."""
from __future__ import annotations

import pytest

from demo_library.demo_header import HEADER_SIZE, DemoHeader
from demo_library.exceptions import InvalidDemoFile

from conftest import build_header


def test_header_size_matches_field_layout() -> None:
    assert HEADER_SIZE == 8 + 4 + 4 + 260 * 4 + 4 * 4
    assert DemoHeader.SIZE == HEADER_SIZE


def test_decodes_every_field() -> None:
    header = DemoHeader.from_bytes(build_header())
    assert header.filestamp == "HL2DEMO"
    assert header.demo_protocol == 3
    assert header.network_protocol == 24
    assert header.server_name == "Uncletopia | Chicago | 1"
    assert header.client_name == "SourceTV Demo"
    assert header.map_name == "cp_process_final"
    assert header.game_directory == "tf"
    assert header.playback_time == pytest.approx(1800.5)
    assert header.ticks == 120033
    assert header.frames == 119811
    assert header.signon_length == 441234


def test_negative_integers_are_signed() -> None:
    header = DemoHeader.from_bytes(build_header(demo_protocol=-1, signon_length=-5))
    assert header.demo_protocol == -1
    assert header.signon_length == -5


def test_parsing_is_idempotent() -> None:
    data = build_header(map_name="koth_product_final")
    assert DemoHeader.from_bytes(data) == DemoHeader.from_bytes(data)


@pytest.mark.parametrize("length", [0, 1, 8, 16, HEADER_SIZE - 1])
def test_short_buffer_is_invalid(length: int) -> None:
    with pytest.raises(InvalidDemoFile):
        DemoHeader.from_bytes(build_header()[:length])


@pytest.mark.parametrize("stamp", [b"PBDEMS2\0", b"HL2DEMOX", b"hl2demo\0", b"\0" * 8])
def test_wrong_filestamp_is_invalid(stamp: bytes) -> None:
    with pytest.raises(InvalidDemoFile):
        DemoHeader.from_bytes(build_header(filestamp=stamp))


def test_trailing_bytes_are_ignored() -> None:
    data = build_header()
    assert DemoHeader.from_bytes(data + b"\xff" * 500) == DemoHeader.from_bytes(data)


def test_from_file_reads_only_the_header(tmp_path) -> None:
    path = tmp_path / "a.dem"
    path.write_bytes(build_header(map_name="pl_upward") + b"garbage body")
    assert DemoHeader.from_file(path).map_name == "pl_upward"


def test_from_file_short_file_is_invalid(tmp_path) -> None:
    path = tmp_path / "short.dem"
    path.write_bytes(build_header()[:100])
    with pytest.raises(InvalidDemoFile):
        DemoHeader.from_file(path)


def test_from_file_missing_file_propagates(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        DemoHeader.from_file(tmp_path / "nope.dem")


def test_stv_detection_and_tick_interval() -> None:
    header = DemoHeader.from_bytes(build_header(server_name="", playback_time=10.0, ticks=660))
    assert header.is_stv is True
    assert header.interval_per_tick == pytest.approx(10.0 / 660)
    assert DemoHeader.from_bytes(build_header(ticks=0)).interval_per_tick == 0.0


def test_to_dict_has_all_fields() -> None:
    data = DemoHeader.from_bytes(build_header()).to_dict()
    assert data["map_name"] == "cp_process_final"
    assert data["is_stv"] is False
    assert set(data) >= {"demo_protocol", "network_protocol", "ticks", "frames", "signon_length"}
