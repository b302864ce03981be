"""Shared test fixtures for the demo library.

Demo files are synthesised byte by byte, so the suite needs no recorded
demos on disk.
"""
from __future__ import annotations

import struct
from pathlib import Path

import pytest

from demo_library.demo import DemoCache
from demo_library.demo_header import HEADER_SIZE

DEFAULT_FIELDS = {
    "filestamp": b"HL2DEMO\0",
    "demo_protocol": 3,
    "network_protocol": 24,
    "server_name": "Uncletopia | Chicago | 1",
    "client_name": "SourceTV Demo",
    "map_name": "cp_process_final",
    "game_directory": "tf",
    "playback_time": 1800.5,
    "ticks": 120033,
    "frames": 119811,
    "signon_length": 441234,
}


def _fixed(text: str, size: int = 260) -> bytes:
    return text.encode("utf-8").ljust(size, b"\0")[:size]


def build_header(**overrides) -> bytes:
    """Header bytes in the on-disk layout, with any field overridden"""
    f = {**DEFAULT_FIELDS, **overrides}
    data = (
        f["filestamp"]
        + struct.pack("<ii", f["demo_protocol"], f["network_protocol"])
        + _fixed(f["server_name"])
        + _fixed(f["client_name"])
        + _fixed(f["map_name"])
        + _fixed(f["game_directory"])
        + struct.pack("<fiii", f["playback_time"], f["ticks"], f["frames"], f["signon_length"])
    )
    assert len(data) == HEADER_SIZE
    return data


@pytest.fixture()
def header_bytes():
    return build_header


@pytest.fixture()
def make_demo(tmp_path: Path):
    """Write a demo file (header plus some body bytes) and return its path"""

    def _make(name: str = "match.dem", directory: Path | None = None, body: bytes = b"\x01" * 64, **fields) -> Path:
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_bytes(build_header(**fields) + body)
        return path

    return _make


@pytest.fixture()
def cache() -> DemoCache:
    return DemoCache()
