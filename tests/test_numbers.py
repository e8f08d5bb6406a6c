import math
import struct

import pytest
from hypothesis import given
from hypothesis import strategies as st

from jsonstream.numbers import (
    UnsupportedValueError,
    format_float32,
    format_float32_lossy,
    format_float64,
    format_float64_lossy,
    format_int,
    format_uint,
)


def _f32(value):
    return struct.unpack("<f", struct.pack("<f", value))[0]


def test_float64_plain():
    assert format_float64(12.3) == "12.3"


def test_float64_whole_number_has_no_point():
    assert format_float64(100.0) == "100"
    assert format_float64(1e20) == "100000000000000000000"


def test_float64_scientific_cutoffs():
    assert format_float64(1e21) == "1e+21"
    assert format_float64(1e-7) == "1e-07"
    assert format_float64(0.000001) == "0.000001"


def test_float64_zero_and_negative():
    assert format_float64(0.0) == "0"
    assert format_float64(-1.5) == "-1.5"


def test_float32_shortest():
    assert format_float32(0.1) == "0.1"
    assert format_float32(12.3) == "12.3"
    assert format_float32(16777217.0) == "16777216"


def test_lossy_float_marshal():
    assert format_float64_lossy(0.1234567) == "0.123457"
    assert format_float32_lossy(0.1234567) == "0.123457"


def test_lossy_whole_and_negative():
    assert format_float64_lossy(2.0) == "2"
    assert format_float64_lossy(-1.5) == "-1.5"
    assert format_float64_lossy(0.05) == "0.05"


def test_lossy_large_values_fall_back():
    assert format_float64_lossy(1e8) == "100000000"
    assert format_float64_lossy(-1e8) == "-100000000"


@pytest.mark.parametrize(
    "func",
    [format_float32, format_float64, format_float32_lossy, format_float64_lossy],
)
@pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
def test_encode_inf_and_nan(func, value):
    with pytest.raises(UnsupportedValueError, match="unsupported value"):
        func(value)


def test_float32_overflow_is_unsupported():
    with pytest.raises(UnsupportedValueError):
        format_float32(1e39)


@given(st.floats(allow_nan=False, allow_infinity=False))
def test_float64_round_trip(value):
    assert float(format_float64(value)) == value


@given(st.floats(width=32, allow_nan=False, allow_infinity=False))
def test_float32_round_trip(value):
    assert _f32(float(format_float32(value))) == value


@given(st.floats(min_value=-5e7, max_value=5e7, allow_nan=False))
def test_float64_lossy_is_close(value):
    assert abs(float(format_float64_lossy(value)) - value) <= 1e-6 * max(1.0, abs(value))


def test_format_int_values():
    assert format_int(0, 8) == "0"
    assert format_int(-128, 8) == "-128"
    assert format_int(-9223372036854775808) == "-9223372036854775808"
    assert format_int(1001) == "1001"


def test_format_uint_values():
    assert format_uint(255, 8) == "255"
    assert format_uint(18446744073709551615) == "18446744073709551615"
    assert format_uint(123) == "123"


@pytest.mark.parametrize("value,bits", [(128, 8), (-129, 8), (1 << 63, 64)])
def test_format_int_out_of_range(value, bits):
    with pytest.raises(ValueError):
        format_int(value, bits)


@pytest.mark.parametrize("value,bits", [(-1, 8), (256, 8), (1 << 64, 64)])
def test_format_uint_out_of_range(value, bits):
    with pytest.raises(ValueError):
        format_uint(value, bits)


def test_unsupported_width():
    with pytest.raises(ValueError):
        format_int(1, 12)
    with pytest.raises(ValueError):
        format_uint(1, 128)


@given(st.integers(min_value=-(1 << 63), max_value=(1 << 63) - 1))
def test_int_round_trip(value):
    assert int(format_int(value, 64)) == value