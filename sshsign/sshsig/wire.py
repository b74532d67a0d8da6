"""SSH wire encoding primitives (RFC 4251 section 5)."""

from __future__ import annotations

import struct

from sshsign.errors import FormatError

_UINT32 = struct.Struct(">I")


def pack_uint32(value: int) -> bytes:
    return _UINT32.pack(value)


def pack_string(value: bytes | str) -> bytes:
    """Encode ``value`` as a length-prefixed SSH string."""
    if isinstance(value, str):
        value = value.encode("utf-8")
    return _UINT32.pack(len(value)) + value


def pack_mpint(value: int) -> bytes:
    """Encode a non-negative integer as an SSH mpint."""
    if value < 0:
        raise ValueError("negative mpint values are not supported")
    if value == 0:
        return pack_string(b"")
    raw = value.to_bytes((value.bit_length() + 7) // 8, "big")
    if raw[0] & 0x80:
        raw = b"\x00" + raw
    return pack_string(raw)


class WireReader:
    """Sequential, bounds-checked reader over SSH wire bytes.

    Every read raises :class:`FormatError` when the buffer is exhausted, so
    truncated input never yields a partially decoded value.
    """

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read_bytes(self, size: int) -> bytes:
        if size < 0 or size > self.remaining:
            raise FormatError(
                f"truncated wire data: wanted {size} bytes, {self.remaining} available"
            )
        chunk = self._data[self._offset : self._offset + size].tobytes()
        self._offset += size
        return chunk

    def read_uint32(self) -> int:
        return _UINT32.unpack(self.read_bytes(4))[0]

    def read_string(self) -> bytes:
        return self.read_bytes(self.read_uint32())

    def read_text(self) -> str:
        raw = self.read_string()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FormatError("wire string is not valid UTF-8") from exc

    def read_mpint(self) -> int:
        raw = self.read_string()
        if raw and raw[0] & 0x80:
            raise FormatError("negative mpint values are not supported")
        return int.from_bytes(raw, "big")

    def read_rest(self) -> bytes:
        return self.read_bytes(self.remaining)

    def expect_end(self) -> None:
        if self.remaining:
            raise FormatError(f"unexpected {self.remaining} trailing bytes in wire data")
