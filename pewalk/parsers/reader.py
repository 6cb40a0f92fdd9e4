"""
Little-Endian Field Reader
===========================

:class:`FieldReader` is the single primitive every PE decoder builds on.
It wraps a seekable binary stream and hands out fixed-width little-endian
integers and raw byte runs, advancing the cursor by exactly the width of
what it returned.

A short read raises :class:`~pewalk.core.errors.TruncatedError`; after
that the cursor position is unspecified and the caller must stop reading.
"""

from __future__ import annotations

import io
import os
import struct
from typing import BinaryIO

from pewalk.core.errors import SeekOutOfRangeError, TruncatedError


# Precompiled codecs keyed by struct format character.
_SCALARS: dict[str, struct.Struct] = {
    "B": struct.Struct("<B"),
    "H": struct.Struct("<H"),
    "I": struct.Struct("<I"),
    "i": struct.Struct("<i"),
}


class FieldReader:
    """Sequential little-endian reader over a seekable binary stream.

    Usage::

        with open(path, "rb") as fh:
            reader = FieldReader(fh)
            magic = reader.read_u16()
            reader.seek(0x3C)
            e_lfanew = reader.read_i32()

    Args:
        stream: Binary stream supporting ``read``, ``seek`` and ``tell``.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        # Measure once; the source is not expected to change during a walk.
        start = stream.tell()
        self._size: int = stream.seek(0, os.SEEK_END)
        stream.seek(start, os.SEEK_SET)

    @classmethod
    def from_bytes(cls, data: bytes) -> FieldReader:
        """Build a reader over an in-memory buffer."""
        return cls(io.BytesIO(data))

    @property
    def size(self) -> int:
        """Total length of the underlying source in bytes."""
        return self._size

    def tell(self) -> int:
        return self._stream.tell()

    def remaining(self) -> int:
        return max(self._size - self._stream.tell(), 0)

    # ------------------------------------------------------------------ #
    #  Positioning
    # ------------------------------------------------------------------ #

    def seek(self, offset: int) -> int:
        """Move to an absolute *offset* from the start of the source.

        Raises:
            SeekOutOfRangeError: If *offset* is negative or not below the
                source length.
        """
        if offset < 0 or offset >= self._size:
            raise SeekOutOfRangeError(offset, self._size)
        return self._stream.seek(offset, os.SEEK_SET)

    # ------------------------------------------------------------------ #
    #  Primitive reads
    # ------------------------------------------------------------------ #

    def read_bytes(self, count: int, *, what: str = "byte run") -> bytes:
        """Read exactly *count* raw bytes.

        Raises:
            TruncatedError: If fewer than *count* bytes remain.
        """
        offset = self._stream.tell()
        data = self._stream.read(count)
        if len(data) != count:
            raise TruncatedError(count, len(data), what=what, offset=offset)
        return data

    def read_scalar(self, code: str, *, what: str = "field") -> int:
        """Read one little-endian integer described by a struct *code*.

        Args:
            code: One of ``"B"`` (u8), ``"H"`` (u16), ``"I"`` (u32), ``"i"`` (i32).
            what: Name used in the error message if the read is short.
        """
        codec = _SCALARS[code]
        return codec.unpack(self.read_bytes(codec.size, what=what))[0]

    def read_u8(self) -> int:
        return self.read_scalar("B")

    def read_u16(self) -> int:
        return self.read_scalar("H")

    def read_u32(self) -> int:
        return self.read_scalar("I")

    def read_i32(self) -> int:
        return self.read_scalar("i")
