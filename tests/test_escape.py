import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from jsonstream.escape import quote, quote_html


def test_plain_string():
    assert quote("123") == '"123"'
    assert quote_html("123") == '"123"'


def test_control_character_escape():
    assert quote("\x01") == '"\\u0001"'


def test_html_characters_escaped():
    assert quote_html("<") == '"\\u003c"'


def test_line_separator_escaped():
    assert quote_html("\u2028") == '"\\u2028"'


def test_quote_keeps_html_characters():
    assert quote("<>&") == '"<>&"'


def test_non_ascii_passes_through():
    assert quote("é") == '"é"'
    assert quote_html("é") == '"é"'


def test_lone_surrogate_replaced():
    assert json.loads(quote_html("a\ud800b")) == "a\ufffdb"


def test_rejects_bytes():
    with pytest.raises(TypeError):
        quote(b"abc")
    with pytest.raises(TypeError):
        quote_html(b"abc")


@given(st.text())
def test_quote_round_trip(text):
    assert json.loads(quote(text)) == text


@given(st.text())
def test_quote_html_round_trip(text):
    assert json.loads(quote_html(text)) == text


@given(st.text())
def test_quote_html_has_no_unsafe_characters(text):
    result = quote_html(text)
    assert result.startswith('"') and result.endswith('"')
    body = result[1:-1]
    for unsafe in "<>&\u2028\u2029":
        assert unsafe not in body


@given(st.text())
def test_quote_has_no_raw_control_characters(text):
    assert all(ord(ch) >= 0x20 for ch in quote(text))


@given(st.text(alphabet=st.characters(min_codepoint=0x20, blacklist_characters='"\\')))
def test_safe_text_is_unchanged(text):
    assert quote(text) == '"' + text + '"'