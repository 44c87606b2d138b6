"""Little-endian primitive writer shared by the model and animation writers."""

import struct
from typing import BinaryIO, Sequence

import numpy as np


_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")
_FLOAT32 = struct.Struct("<f")
_VECTOR3 = struct.Struct("<3f")
_VECTOR4 = struct.Struct("<4f")


class BinaryWriter:
    """Thin wrapper around a binary stream that writes engine primitives"""

    def __init__(self, stream: BinaryIO):
        """
        Initialize writer

        Args:
            stream: Any object with a ``write(bytes)`` method (file, BytesIO)
        """
        self.stream = stream
        self.bytes_written = 0

    def write_bytes(self, data: bytes) -> None:
        self.stream.write(data)
        self.bytes_written += len(data)

    def write_int(self, value: int) -> None:
        self.write_bytes(_INT32.pack(int(value)))

    def write_uint(self, value: int) -> None:
        self.write_bytes(_UINT32.pack(int(value) & 0xFFFFFFFF))

    def write_float(self, value: float) -> None:
        self.write_bytes(_FLOAT32.pack(float(np.float32(value))))

    def write_byte(self, value: int) -> None:
        self.write_bytes(bytes((int(value) & 0xFF,)))

    def write_string_sz(self, text: str) -> None:
        """Write a UTF-8 string followed by a zero terminator (no BOM)"""
        self.write_bytes(text.encode("utf-8") + b"\0")

    def write_vector3(self, v: Sequence[float]) -> None:
        self.write_bytes(_VECTOR3.pack(*(float(np.float32(c)) for c in v[:3])))

    def write_quaternion(self, q: Sequence[float]) -> None:
        """
        Write a quaternion in engine order

        Args:
            q: Quaternion as (x, y, z, w); written as w, x, y, z
        """
        x, y, z, w = (float(np.float32(c)) for c in q[:4])
        self.write_bytes(_VECTOR4.pack(w, x, y, z))

    def write_floats(self, values: Sequence[float]) -> None:
        self.write_bytes(np.asarray(values, dtype="<f4").tobytes())

    def write_array(self, array: np.ndarray) -> None:
        """Write a numpy array's raw bytes (caller fixes dtype and endianness)"""
        self.write_bytes(np.ascontiguousarray(array).tobytes())
