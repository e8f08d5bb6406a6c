"""Text forms of integers and floats as they appear in JSON output."""

from __future__ import annotations

import math
import struct
from decimal import Decimal

__all__ = [
    "UnsupportedValueError",
    "format_int",
    "format_uint",
    "format_float32",
    "format_float64",
    "format_float32_lossy",
    "format_float64_lossy",
]

_INT_BITS = (8, 16, 32, 64)
_LOSSY_SCALE = 1_000_000
_LOSSY_LIMIT = 0x4FFFFFF


class UnsupportedValueError(ValueError):
    """Raised for float values that JSON cannot represent (NaN, infinities)."""


def _to_float32(value: float) -> float:
    """Round a Python float to the nearest single-precision value."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


_F32_SMALL = _to_float32(1e-6)
_F32_LARGE = _to_float32(1e21)
_F32_LOSSY_LIMIT = _to_float32(float(_LOSSY_LIMIT))


def _describe(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "+Inf" if value > 0 else "-Inf"


def _check_finite(value: float) -> None:
    if math.isinf(value) or math.isnan(value):
        raise UnsupportedValueError(f"unsupported value: {_describe(value)}")


def _check_bits(bits: int) -> None:
    if bits not in _INT_BITS:
        raise ValueError(f"unsupported integer width: {bits}")


def format_int(value: int, bits: int = 64) -> str:
    """Decimal text of a signed integer that must fit in ``bits`` bits."""
    _check_bits(bits)
    value = int(value)
    limit = 1 << (bits - 1)
    if not -limit <= value < limit:
        raise ValueError(f"{value} does not fit in int{bits}")
    return str(value)


def format_uint(value: int, bits: int = 64) -> str:
    """Decimal text of an unsigned integer that must fit in ``bits`` bits."""
    _check_bits(bits)
    value = int(value)
    if not 0 <= value < (1 << bits):
        raise ValueError(f"{value} does not fit in uint{bits}")
    return str(value)


def _digits_of(text: str) -> tuple[str, int]:
    """Significant digits of a positive decimal and the position of its point.

    The value equals ``0.<digits> * 10**position``.
    """
    _, digit_tuple, exponent = Decimal(text).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    while len(digits) > 1 and digits[0] == 0:
        digits.pop(0)
    return "".join(map(str, digits)), len(digits) + exponent


def _shortest32(value: float) -> tuple[str, int]:
    for precision in range(0, 10):
        candidate = f"{value:.{precision}e}"
        if _to_float32(float(candidate)) == value:
            return _digits_of(candidate)
    return _digits_of(repr(value))


def _shortest64(value: float) -> tuple[str, int]:
    return _digits_of(repr(value))


def _render(negative: bool, digits: str, position: int, scientific: bool) -> str:
    sign = "-" if negative else ""
    if scientific:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        exponent = position - 1
        exp_sign = "-" if exponent < 0 else "+"
        return f"{sign}{mantissa}e{exp_sign}{abs(exponent):02d}"
    if position <= 0:
        return f"{sign}0.{'0' * -position}{digits}"
    if position >= len(digits):
        return f"{sign}{digits}{'0' * (position - len(digits))}"
    return f"{sign}{digits[:position]}.{digits[position:]}"


def format_float32(value: float) -> str:
    """Shortest text that reads back as the same single-precision value."""
    value = _to_float32(value)
    _check_finite(value)
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    magnitude = abs(value)
    scientific = magnitude < _F32_SMALL or magnitude >= _F32_LARGE
    digits, position = _shortest32(magnitude)
    return _render(value < 0, digits, position, scientific)


def format_float64(value: float) -> str:
    """Shortest text that reads back as the same double-precision value."""
    value = float(value)
    _check_finite(value)
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    magnitude = abs(value)
    scientific = magnitude < 1e-6 or magnitude >= 1e21
    digits, position = _shortest64(magnitude)
    return _render(value < 0, digits, position, scientific)


def _lossy_digits(value: float) -> str:
    scaled = int(value * float(_LOSSY_SCALE) + 0.5)
    whole, fraction = divmod(scaled, _LOSSY_SCALE)
    if fraction == 0:
        return str(whole)
    return f"{whole}.{fraction:06d}".rstrip("0")


def format_float32_lossy(value: float) -> str:
    """Single-precision value rounded to six fractional digits."""
    value = _to_float32(value)
    _check_finite(value)
    prefix = ""
    if value < 0:
        prefix = "-"
        value = -value
    if value > _F32_LOSSY_LIMIT:
        return prefix + format_float32(value)
    return prefix + _lossy_digits(value)


def format_float64_lossy(value: float) -> str:
    """Double-precision value rounded to six fractional digits."""
    value = float(value)
    _check_finite(value)
    prefix = ""
    if value < 0:
        prefix = "-"
        value = -value
    if value > _LOSSY_LIMIT:
        return prefix + format_float64(value)
    return prefix + _lossy_digits(value)