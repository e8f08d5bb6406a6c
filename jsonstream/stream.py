"""A buffered JSON writer with optional indentation."""

from __future__ import annotations

from typing import BinaryIO

from .escape import quote, quote_html
from .numbers import (
    format_float32,
    format_float32_lossy,
    format_float64,
    format_float64_lossy,
    format_int,
    format_uint,
)

__all__ = ["Stream"]


def _encode(text: str) -> bytes:
    try:
        return text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        return text.encode("utf-8", "replace")


class Stream:
    """Collects JSON text in a buffer and hands it to ``out`` when flushed.

    With no ``out`` the result stays in the buffer and is read back with
    :meth:`buffer`. A non-zero ``indention_step`` pretty-prints arrays and
    objects with that many spaces per level.
    """

    def __init__(self, out: BinaryIO | None = None, indention_step: int = 0) -> None:
        if indention_step < 0:
            raise ValueError("indention_step must not be negative")
        self.out = out
        self.indention_step = indention_step
        self._buf = bytearray()
        self._indention = 0

    def __enter__(self) -> Stream:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()

    def reset(self, out: BinaryIO | None = None) -> None:
        """Drop buffered output and direct future output to ``out``."""
        self.out = out
        self._buf.clear()

    def buffer(self) -> bytes:
        """The bytes currently held in the buffer."""
        return bytes(self._buf)

    def buffered(self) -> int:
        """Number of bytes currently held in the buffer."""
        return len(self._buf)

    def write(self, data: bytes) -> int:
        """Append ``data``; with a writer attached, push the buffer to it.

        Returns the number of bytes of ``data`` accepted.
        """
        self._buf += data
        if self.out is None:
            return len(data)
        pending = bytes(self._buf)
        written = self.out.write(pending)
        if written is None:
            written = len(pending)
        del self._buf[:written]
        return min(written, len(data))

    def flush(self) -> None:
        """Write everything buffered to the attached writer, if any."""
        if self.out is None:
            return
        self.out.write(bytes(self._buf))
        self._buf.clear()

    def write_raw(self, text: str | bytes) -> None:
        """Append ``text`` as it is, without quoting."""
        self._buf += text if isinstance(text, (bytes, bytearray)) else _encode(text)

    def write_nil(self) -> None:
        self._buf += b"null"

    def write_true(self) -> None:
        self._buf += b"true"

    def write_false(self) -> None:
        self._buf += b"false"

    def write_bool(self, value: bool) -> None:
        if value:
            self.write_true()
        else:
            self.write_false()

    def write_int(self, value: int, bits: int = 64) -> None:
        self._buf += format_int(value, bits).encode("ascii")

    def write_uint(self, value: int, bits: int = 64) -> None:
        self._buf += format_uint(value, bits).encode("ascii")

    def write_float32(self, value: float) -> None:
        self._buf += format_float32(value).encode("ascii")

    def write_float64(self, value: float) -> None:
        self._buf += format_float64(value).encode("ascii")

    def write_float32_lossy(self, value: float) -> None:
        self._buf += format_float32_lossy(value).encode("ascii")

    def write_float64_lossy(self, value: float) -> None:
        self._buf += format_float64_lossy(value).encode("ascii")

    def write_string(self, text: str) -> None:
        """Append ``text`` as a quoted JSON string."""
        self._buf += _encode(quote(text))

    def write_string_html_escaped(self, text: str) -> None:
        """Append ``text`` as a quoted JSON string safe to embed in HTML."""
        self._buf += _encode(quote_html(text))

    def write_object_start(self) -> None:
        self._indention += self.indention_step
        self._buf += b"{"
        self._write_indention(0)

    def write_object_field(self, name: str) -> None:
        self.write_string(name)
        self._buf += b": " if self._indention > 0 else b":"

    def write_object_end(self) -> None:
        self._write_indention(self.indention_step)
        self._indention -= self.indention_step
        self._buf += b"}"

    def write_empty_object(self) -> None:
        self._buf += b"{}"

    def write_more(self) -> None:
        self._buf += b","
        self._write_indention(0)

    def write_array_start(self) -> None:
        self._indention += self.indention_step
        self._buf += b"["
        self._write_indention(0)

    def write_empty_array(self) -> None:
        self._buf += b"[]"

    def write_array_end(self) -> None:
        self._write_indention(self.indention_step)
        self._indention -= self.indention_step
        self._buf += b"]"

    def _write_indention(self, delta: int) -> None:
        if self._indention == 0:
            return
        self._buf += b"\n" + b" " * (self._indention - delta)