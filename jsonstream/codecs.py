"""Encoders for scalar values: strings, fixed-width numbers, booleans, bytes."""

from __future__ import annotations

import base64
import struct

from .stream import Stream

__all__ = [
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "Float32",
    "StringCodec",
    "IntCodec",
    "FloatCodec",
    "BoolCodec",
    "Base64Codec",
    "native_encoder",
]


class _FixedInt(int):
    """An integer that must fit in a fixed number of bits."""

    BITS = 64
    SIGNED = True

    def __new__(cls, value=0):
        number = int.__new__(cls, value)
        if cls.SIGNED:
            low, high = -(1 << (cls.BITS - 1)), (1 << (cls.BITS - 1)) - 1
        else:
            low, high = 0, (1 << cls.BITS) - 1
        if not low <= number <= high:
            raise ValueError(f"{int(number)} does not fit in {cls.__name__}")
        return number


class Int8(_FixedInt):
    BITS, SIGNED = 8, True


class Int16(_FixedInt):
    BITS, SIGNED = 16, True


class Int32(_FixedInt):
    BITS, SIGNED = 32, True


class Int64(_FixedInt):
    BITS, SIGNED = 64, True


class Uint8(_FixedInt):
    BITS, SIGNED = 8, False


class Uint16(_FixedInt):
    BITS, SIGNED = 16, False


class Uint32(_FixedInt):
    BITS, SIGNED = 32, False


class Uint64(_FixedInt):
    BITS, SIGNED = 64, False


class Float32(float):
    """A float rounded to single precision."""

    def __new__(cls, value=0.0):
        try:
            rounded = struct.unpack("<f", struct.pack("<f", float(value)))[0]
        except OverflowError:
            rounded = float("inf") if float(value) > 0 else float("-inf")
        return float.__new__(cls, rounded)


class StringCodec:
    def encode(self, value: str, stream: Stream) -> None:
        stream.write_string(value)

    def is_empty(self, value: str) -> bool:
        return value == ""


class IntCodec:
    def __init__(self, bits: int = 64, signed: bool = True) -> None:
        self.bits = bits
        self.signed = signed

    def encode(self, value: int, stream: Stream) -> None:
        if self.signed:
            stream.write_int(value, self.bits)
        else:
            stream.write_uint(value, self.bits)

    def is_empty(self, value: int) -> bool:
        return value == 0


class FloatCodec:
    def __init__(self, bits: int = 64, lossy: bool = False) -> None:
        if bits not in (32, 64):
            raise ValueError(f"unsupported float width: {bits}")
        self.bits = bits
        self.lossy = lossy

    def encode(self, value: float, stream: Stream) -> None:
        if self.bits == 32:
            if self.lossy:
                stream.write_float32_lossy(value)
            else:
                stream.write_float32(value)
        elif self.lossy:
            stream.write_float64_lossy(value)
        else:
            stream.write_float64(value)

    def is_empty(self, value: float) -> bool:
        return value == 0


class BoolCodec:
    def encode(self, value: bool, stream: Stream) -> None:
        stream.write_bool(value)

    def is_empty(self, value: bool) -> bool:
        return not value


class Base64Codec:
    """Byte strings as standard base64 text; ``None`` as null."""

    def encode(self, value: bytes | None, stream: Stream) -> None:
        if value is None:
            stream.write_nil()
            return
        stream.write_raw(b'"' + base64.b64encode(bytes(value)) + b'"')

    def is_empty(self, value: bytes | None) -> bool:
        return value is None or len(value) == 0


_FIXED_INT_TYPES = (Int8, Int16, Int32, Int64, Uint8, Uint16, Uint32, Uint64)


def native_encoder(tp: type, lossy_floats: bool = False):
    """The codec for a scalar type, or ``None`` if ``tp`` is not scalar."""
    if not isinstance(tp, type):
        return None
    if issubclass(tp, (bytes, bytearray, memoryview)):
        return Base64Codec()
    if issubclass(tp, str):
        return StringCodec()
    if issubclass(tp, bool):
        return BoolCodec()
    for fixed in _FIXED_INT_TYPES:
        if issubclass(tp, fixed):
            return IntCodec(fixed.BITS, fixed.SIGNED)
    if issubclass(tp, int):
        return IntCodec(64, True)
    if issubclass(tp, Float32):
        return FloatCodec(32, lossy_floats)
    if issubclass(tp, float):
        return FloatCodec(64, lossy_floats)
    return None