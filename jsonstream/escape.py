"""Quoting of strings as JSON string literals."""

from __future__ import annotations

import re

__all__ = ["quote", "quote_html"]

_SHORT_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_UNSAFE = re.compile(r'[\x00-\x1f"\\]')
_UNSAFE_HTML = re.compile('[\\x00-\\x1f"\\\\<>&\u2028\u2029\ud800-\udfff]')


def _escape(match: re.Match[str]) -> str:
    char = match.group()
    short = _SHORT_ESCAPES.get(char)
    if short is not None:
        return short
    code = ord(char)
    if 0xD800 <= code <= 0xDFFF:
        return "\\ufffd"
    return f"\\u{code:04x}"


def _require_text(text: object) -> str:
    if not isinstance(text, str):
        raise TypeError(f"expected str, got {type(text).__name__}")
    return text


def quote(text: str) -> str:
    """Quote ``text`` as a JSON string, escaping only what JSON requires."""
    text = _require_text(text)
    return '"' + _UNSAFE.sub(_escape, text) + '"'


def quote_html(text: str) -> str:
    """Quote ``text`` as a JSON string that is also safe inside HTML.

    Besides what JSON requires, ``<``, ``>``, ``&``, U+2028 and U+2029 are
    escaped, and lone surrogates are replaced with ``\\ufffd``.
    """
    text = _require_text(text)
    return '"' + _UNSAFE_HTML.sub(_escape, text) + '"'