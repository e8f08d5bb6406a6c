import base64

import pytest

from jsonstream.codecs import (
    Base64Codec,
    BoolCodec,
    FloatCodec,
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    IntCodec,
    StringCodec,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
    native_encoder,
)
from jsonstream.numbers import UnsupportedValueError
from jsonstream.stream import Stream


def _encode(codec, value):
    stream = Stream()
    codec.encode(value, stream)
    return stream.buffer()


def test_base64_encodes_bytes():
    assert _encode(Base64Codec(), bytes([1, 2, 3])) == b'"AQID"'


def test_base64_empty_and_none():
    codec = Base64Codec()
    assert _encode(codec, b"") == b'""'
    assert _encode(codec, None) == b"null"
    assert codec.is_empty(b"")
    assert codec.is_empty(None)
    assert not codec.is_empty(b"x")


def test_base64_round_trip():
    data = bytes(range(256))
    out = _encode(Base64Codec(), data)
    assert base64.b64decode(out[1:-1]) == data


def test_bool_codec():
    codec = BoolCodec()
    assert _encode(codec, True) == b"true"
    assert _encode(codec, False) == b"false"
    assert codec.is_empty(False)
    assert not codec.is_empty(True)


def test_string_codec():
    codec = StringCodec()
    assert _encode(codec, "123") == b'"123"'
    assert codec.is_empty("")
    assert not codec.is_empty("a")


@pytest.mark.parametrize("value", [0, 7, -128, 1001, -(2**63)])
def test_int_codec_round_trip(value):
    assert int(_encode(IntCodec(64, True), value)) == value


def test_int_codec_range_checks():
    with pytest.raises(ValueError):
        _encode(IntCodec(8, True), 128)
    with pytest.raises(ValueError):
        _encode(IntCodec(16, False), -1)


def test_int_codec_is_empty():
    codec = IntCodec(32, False)
    assert codec.is_empty(0)
    assert not codec.is_empty(1)


def test_float_lossy():
    assert _encode(FloatCodec(64, True), 0.1234567) == b"0.123457"
    assert _encode(FloatCodec(32, True), 0.1234567) == b"0.123457"


def test_float_nan_rejected():
    with pytest.raises(UnsupportedValueError):
        _encode(FloatCodec(64), float("nan"))
    with pytest.raises(UnsupportedValueError):
        _encode(FloatCodec(32), float("inf"))


def test_float32_round_trip():
    value = Float32(0.1)
    out = _encode(FloatCodec(32), value)
    assert Float32(float(out)) == value


def test_float_is_empty():
    codec = FloatCodec()
    assert codec.is_empty(0.0)
    assert not codec.is_empty(12.3)


def test_float_codec_rejects_bad_width():
    with pytest.raises(ValueError):
        FloatCodec(16)


@pytest.mark.parametrize(
    "cls, bad",
    [(Int8, 128), (Int16, -32769), (Int32, 2**31), (Int64, 2**63),
     (Uint8, 256), (Uint16, -1), (Uint32, 2**32), (Uint64, 2**64)],
)
def test_fixed_ints_reject_out_of_range(cls, bad):
    with pytest.raises(ValueError):
        cls(bad)


def test_fixed_int_keeps_value():
    assert Int8(-128) == -128
    assert Uint64(2**64 - 1) == 2**64 - 1


@pytest.mark.parametrize(
    "tp, bits, signed",
    [(Int8, 8, True), (Int16, 16, True), (Int32, 32, True), (Int64, 64, True),
     (Uint8, 8, False), (Uint16, 16, False), (Uint32, 32, False),
     (Uint64, 64, False), (int, 64, True)],
)
def test_native_encoder_ints(tp, bits, signed):
    codec = native_encoder(tp)
    assert isinstance(codec, IntCodec)
    assert (codec.bits, codec.signed) == (bits, signed)


def test_native_encoder_other_scalars():
    assert isinstance(native_encoder(bool), BoolCodec)
    assert isinstance(native_encoder(str), StringCodec)
    assert isinstance(native_encoder(bytes), Base64Codec)
    f32 = native_encoder(Float32, True)
    assert (f32.bits, f32.lossy) == (32, True)
    assert native_encoder(float).bits == 64


def test_native_encoder_subclass_of_str():
    class Name(str):
        pass

    codec = native_encoder(Name)
    assert _encode(codec, Name("abc")) == b'"abc"'


def test_native_encoder_unsupported():
    assert native_encoder(list) is None
    assert native_encoder(dict) is None