import struct

from demo_library.exceptions import OutOfBoundsRead


class ByteCursor:
    """Forward-only reader over an in-memory byte buffer.

    All multi-byte values are little-endian. A read that does not fit in the
    remaining bytes raises OutOfBoundsRead and leaves the cursor where it was.
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read_bytes(self, n: int) -> bytes:
        if n < 0 or n > self.remaining:
            raise OutOfBoundsRead(n, self._pos, len(self._data))
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def read_string(self, n: int) -> str:
        """Read a fixed-width field of n bytes, text ends at the first NUL"""
        raw = self.read_bytes(n)
        end = raw.find(b'\0')
        if end >= 0:
            raw = raw[:end]
        return raw.decode('utf-8', errors='replace')

    def read_int(self) -> int:
        return struct.unpack('<i', self.read_bytes(4))[0]

    def read_float(self) -> float:
        return struct.unpack('<f', self.read_bytes(4))[0]
