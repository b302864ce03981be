# demo_header.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, ClassVar, Dict
import logging

from demo_library.byte_cursor import ByteCursor
from demo_library.exceptions import InvalidDemoFile, OutOfBoundsRead

logger = logging.getLogger(__name__)

FILESTAMP = "HL2DEMO"
STAMP_SIZE = 8
STRING_LENGTH = 260
HEADER_SIZE = STAMP_SIZE + 4 + 4 + STRING_LENGTH * 4 + 4 * 4


@dataclass(frozen=True)
class DemoHeader:
    """
    Fixed-size header at the start of a Source engine demo file.
    Reference: https://developer.valvesoftware.com/wiki/DEM_Format

    Only the header is read; the message stream that follows it is left alone.
    """

    SIZE: ClassVar[int] = HEADER_SIZE

    filestamp: str
    demo_protocol: int
    network_protocol: int
    server_name: str
    client_name: str
    map_name: str
    game_directory: str
    playback_time: float
    ticks: int
    frames: int
    signon_length: int

    @property
    def is_stv(self) -> bool:
        """SourceTV demos have an empty server field in their header"""
        return self.server_name == ""

    @property
    def interval_per_tick(self) -> float:
        if self.ticks <= 0:
            return 0.0
        return self.playback_time / self.ticks

    @classmethod
    def dump_header_bytes(cls, raw_data: bytes) -> str:
        """Dump header bytes in a readable format for debugging"""
        lines = [f"Header size: {len(raw_data)} bytes"]
        for i in range(0, len(raw_data), 16):
            chunk = raw_data[i:i+16]
            hex_values = ' '.join(f'{b:02x}' for b in chunk)
            ascii_values = ''.join(chr(b) if 32 <= b <= 126 else '.' for b in chunk)
            lines.append(f"{i:04x}: {hex_values:48s} {ascii_values}")
        return '\n'.join(lines)

    @classmethod
    def from_bytes(cls, raw_data: bytes, source: str = "<bytes>") -> DemoHeader:
        """Decode a header from the first SIZE bytes of raw_data"""
        if len(raw_data) < cls.SIZE:
            logger.warning(
                f"Error reading file {source}: read {len(raw_data)} bytes, expected {cls.SIZE}."
            )
            raise InvalidDemoFile(source, f"header too short ({len(raw_data)} of {cls.SIZE} bytes)")

        cursor = ByteCursor(raw_data[:cls.SIZE])
        try:
            filestamp = cursor.read_string(STAMP_SIZE)
            if filestamp != FILESTAMP:
                logger.warning(f"File {source} has an invalid file stamp '{filestamp}'!")
                logger.debug("Rejected header:\n" + cls.dump_header_bytes(raw_data[:64]))
                raise InvalidDemoFile(source, f"invalid file stamp {filestamp!r}")

            return cls(
                filestamp=filestamp,
                demo_protocol=cursor.read_int(),
                network_protocol=cursor.read_int(),
                server_name=cursor.read_string(STRING_LENGTH),
                client_name=cursor.read_string(STRING_LENGTH),
                map_name=cursor.read_string(STRING_LENGTH),
                game_directory=cursor.read_string(STRING_LENGTH),
                playback_time=cursor.read_float(),
                ticks=cursor.read_int(),
                frames=cursor.read_int(),
                signon_length=cursor.read_int(),
            )
        except OutOfBoundsRead as e:
            raise InvalidDemoFile(source, str(e)) from e

    @classmethod
    def from_file(cls, demo_path: str | Path) -> DemoHeader:
        """Read and decode the header of a demo file"""
        path = Path(demo_path)
        logger.debug(f"Reading file header of {path}")
        with path.open('rb') as demo_file:
            header_data = demo_file.read(cls.SIZE)
        return cls.from_bytes(header_data, source=str(path))

    def to_dict(self) -> Dict[str, Any]:
        """Convert header to a dictionary format for serialization"""
        data = asdict(self)
        data['is_stv'] = self.is_stv
        return data

    def __str__(self) -> str:
        return (
            f"{self.filestamp} demo (protocol {self.demo_protocol}/{self.network_protocol})\n"
            f"Map: {self.map_name}\n"
            f"Server: {self.server_name}\n"
            f"Client: {self.client_name}\n"
            f"Duration: {self.playback_time:.2f}s\n"
            f"Ticks: {self.ticks}"
        )
