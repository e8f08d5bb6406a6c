# jsonstream

A small JSON writer built around a buffered `Stream` and a set of typed
encoders. It writes integers of a fixed width, single and double precision
floats (shortest round-trip form, or rounded to six fractional digits),
strings with optional HTML-safe escaping, byte strings as base64, optional
values, sequences, mappings and dataclass records, compact or indented.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Writing by hand: `jsonstream.stream.Stream`

```python
from jsonstream.stream import Stream

stream = Stream(None, 2)          # no writer, indent by two spaces
stream.write_object_start()
stream.write_object_field("hello")
stream.write_int(1, 64)
stream.write_more()
stream.write_object_field("world")
stream.write_int(2, 64)
stream.write_object_end()
print(stream.buffer().decode())
# {
#   "hello": 1,
#   "world": 2
# }
```

The output collects in a buffer (`buffer()`, `buffered()`). Given a writable
binary file as `out`, the stream sends its buffer there on `flush()`, and
`write(data)` pushes the buffer to it straight away. Used as a context
manager, the stream flushes when the block ends without an error. `reset(out)`
drops what is buffered and switches to a new writer.

Besides the structural calls (`write_object_start`, `write_object_field`,
`write_object_end`, `write_empty_object`, `write_array_start`, `write_more`,
`write_array_end`, `write_empty_array`) there are `write_nil`, `write_true`,
`write_false`, `write_bool`, `write_int(value, bits)`,
`write_uint(value, bits)`, `write_float32`, `write_float64`, their
`_lossy` variants, `write_string`, `write_string_html_escaped` and
`write_raw`.

## Encoding values: `jsonstream.encoders`

```python
from dataclasses import dataclass
from jsonstream.encoders import marshal_to_string, EncoderConfig

@dataclass
class ColorGroup:
    ID: int
    Name: str
    Colors: list[str]

group = ColorGroup(1, "Reds", ["Crimson", "Red", "Ruby", "Maroon"])
print(marshal_to_string(group, EncoderConfig()))
# {"ID":1,"Name":"Reds","Colors":["Crimson","Red","Ruby","Maroon"]}
```

`marshal` returns bytes, `marshal_to_string` text. The encoder is chosen
from each value's runtime type; `encoder_for(tp, config)` returns the encoder
for a type directly, with `encode(value, stream)` and `is_empty(value)`.

- `None` is written as `null`; `Optional[...]` fields use `OptionalEncoder`.
- Lists, tuples and other sequences become arrays (`SliceEncoder`).
- Dicts become objects; keys must be strings or integers.
- `bytes` and `bytearray` become base64 strings.
- Dataclasses become objects of their public fields, in declaration order.
  Field metadata under the config's `tag_key` (default `"json"`) holds a tag
  such as `"name,omitempty"`: a new name, `omitempty` to skip empty values,
  `string` to write the value quoted, or `"-"` to leave the field out.
- Integers are 64-bit by default; `jsonstream.codecs` has `Int8` … `Int64`,
  `Uint8` … `Uint64` and `Float32` for fixed widths and single precision.

`EncoderConfig` options: `indention_step`, `marshal_float_with_6_digits`,
`escape_html`, `sort_map_keys` and `tag_key`.

Infinities and NaN raise `jsonstream.numbers.UnsupportedValueError`; types
that cannot be encoded raise `UnsupportedTypeError`. Error messages are
prefixed with the path of the field or sequence where they occurred.

## Formatting helpers

`jsonstream.numbers` offers `format_int`, `format_uint`, `format_float32`,
`format_float64`, `format_float32_lossy` and `format_float64_lossy`;
`jsonstream.escape` offers `quote` and `quote_html` for JSON string literals.

## What it does not do

The package only writes JSON. It has no parser: there is no way to read JSON
text back into values, dataclasses or streams of tokens.