"""Encoders for composite values: optionals, sequences, mappings, dataclasses."""

from __future__ import annotations

import collections.abc
import dataclasses
import types
import typing
from contextlib import contextmanager
from typing import Any, Iterator

from .codecs import (
    Float32,
    Int8,
    Int16,
    Int32,
    Int64,
    StringCodec,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
    native_encoder,
)
from .numbers import UnsupportedValueError
from .stream import Stream

__all__ = [
    "EncoderConfig",
    "UnsupportedTypeError",
    "OptionalEncoder",
    "SliceEncoder",
    "DynamicEncoder",
    "StructFieldEncoder",
    "StructEncoder",
    "EmptyStructEncoder",
    "StringModeNumberEncoder",
    "StringModeStringEncoder",
    "encoder_for",
    "marshal",
    "marshal_to_string",
]


@dataclasses.dataclass(frozen=True)
class EncoderConfig:
    """Options that shape the JSON produced by :func:`marshal`.

    ``tag_key`` names the dataclass field metadata entry that holds the
    field's JSON tag, such as ``"name,omitempty"`` or ``"-"``.
    """

    indention_step: int = 0
    marshal_float_with_6_digits: bool = False
    escape_html: bool = False
    sort_map_keys: bool = False
    tag_key: str = "json"


_DEFAULT_CONFIG = EncoderConfig()


class UnsupportedTypeError(TypeError):
    """Raised when no encoder exists for a type."""


_WRAPPED_ERRORS = (UnsupportedValueError, UnsupportedTypeError)


@contextmanager
def _context(prefix: str) -> Iterator[None]:
    """Prefix the message of encoding errors raised inside the block."""
    try:
        yield
    except _WRAPPED_ERRORS as exc:
        raise type(exc)(f"{prefix}{exc}") from exc


class _HtmlStringCodec(StringCodec):
    def encode(self, value: str, stream: Stream) -> None:
        stream.write_string_html_escaped(value)


class OptionalEncoder:
    """Writes ``null`` for ``None`` and defers to ``elem_encoder`` otherwise."""

    def __init__(self, elem_encoder) -> None:
        self.elem_encoder = elem_encoder

    def encode(self, value, stream: Stream) -> None:
        if value is None:
            stream.write_nil()
        else:
            self.elem_encoder.encode(value, stream)

    def is_empty(self, value) -> bool:
        return value is None


class SliceEncoder:
    """Writes a sequence as a JSON array; ``None`` becomes ``null``."""

    def __init__(self, elem_encoder, type_name: str = "list") -> None:
        self.elem_encoder = elem_encoder
        self.type_name = type_name

    def encode(self, value, stream: Stream) -> None:
        if value is None:
            stream.write_nil()
            return
        if len(value) == 0:
            stream.write_empty_array()
            return
        with _context(f"{self.type_name}: "):
            stream.write_array_start()
            for index, item in enumerate(value):
                if index:
                    stream.write_more()
                self.elem_encoder.encode(item, stream)
            stream.write_array_end()

    def is_empty(self, value) -> bool:
        return value is None or len(value) == 0


class _MapEncoder:
    """Writes a mapping with string or integer keys as a JSON object."""

    def __init__(self, value_encoder, sort_keys: bool = False) -> None:
        self.value_encoder = value_encoder
        self.sort_keys = sort_keys

    @staticmethod
    def _key_text(key) -> str:
        if isinstance(key, str):
            return key
        if isinstance(key, int) and not isinstance(key, bool):
            return str(int(key))
        raise UnsupportedTypeError(f"unsupported map key type: {type(key).__name__}")

    def encode(self, value, stream: Stream) -> None:
        if value is None:
            stream.write_nil()
            return
        if len(value) == 0:
            stream.write_empty_object()
            return
        entries = [(self._key_text(key), item) for key, item in value.items()]
        if self.sort_keys:
            entries.sort(key=lambda entry: entry[0])
        stream.write_object_start()
        for index, (key, item) in enumerate(entries):
            if index:
                stream.write_more()
            stream.write_object_field(key)
            self.value_encoder.encode(item, stream)
        stream.write_object_end()

    def is_empty(self, value) -> bool:
        return value is None or len(value) == 0


class DynamicEncoder:
    """Chooses the encoder from the runtime type of each value."""

    def __init__(self, config: EncoderConfig | None = None) -> None:
        self.config = config or _DEFAULT_CONFIG

    def encode(self, value, stream: Stream) -> None:
        if value is None:
            stream.write_nil()
            return
        encoder_for(type(value), self.config).encode(value, stream)

    def is_empty(self, value) -> bool:
        return value is None


class StructFieldEncoder:
    """Encodes one attribute of a dataclass instance."""

    def __init__(self, name: str, encoder, omitempty: bool = False) -> None:
        self.name = name
        self.encoder = encoder
        self.omitempty = omitempty

    def encode(self, value, stream: Stream) -> None:
        with _context(f"{self.name}: "):
            self.encoder.encode(getattr(value, self.name), stream)

    def is_empty(self, value) -> bool:
        return self.encoder.is_empty(getattr(value, self.name))


class StructEncoder:
    """Writes a dataclass instance as a JSON object of its fields, in order."""

    def __init__(self, type_name: str, fields: list[tuple[str, StructFieldEncoder]]) -> None:
        self.type_name = type_name
        self.fields = fields

    def encode(self, value, stream: Stream) -> None:
        with _context(f"{self.type_name}."):
            stream.write_object_start()
            first = True
            for to_name, field in self.fields:
                if field.omitempty and field.is_empty(value):
                    continue
                if not first:
                    stream.write_more()
                stream.write_object_field(to_name)
                field.encode(value, stream)
                first = False
            stream.write_object_end()

    def is_empty(self, value) -> bool:
        return False


class EmptyStructEncoder:
    """Writes ``{}`` for dataclasses without encodable fields."""

    def encode(self, value, stream: Stream) -> None:
        stream.write_empty_object()

    def is_empty(self, value) -> bool:
        return False


class StringModeNumberEncoder:
    """Writes a number or boolean wrapped in quotes."""

    def __init__(self, elem_encoder) -> None:
        self.elem_encoder = elem_encoder

    def encode(self, value, stream: Stream) -> None:
        stream.write_raw(b'"')
        self.elem_encoder.encode(value, stream)
        stream.write_raw(b'"')

    def is_empty(self, value) -> bool:
        return self.elem_encoder.is_empty(value)


class StringModeStringEncoder:
    """Writes the JSON text of a value as a quoted JSON string."""

    def __init__(self, elem_encoder) -> None:
        self.elem_encoder = elem_encoder

    def encode(self, value, stream: Stream) -> None:
        inner = Stream()
        self.elem_encoder.encode(value, inner)
        stream.write_string(inner.buffer().decode("utf-8", "surrogateescape"))

    def is_empty(self, value) -> bool:
        return self.elem_encoder.is_empty(value)


class _Deferred:
    """Stands in for an encoder still being built, for recursive dataclasses."""

    def __init__(self) -> None:
        self.target = None

    def encode(self, value, stream: Stream) -> None:
        self.target.encode(value, stream)

    def is_empty(self, value) -> bool:
        return self.target.is_empty(value)


@dataclasses.dataclass
class _Binding:
    to_name: str
    tagged: bool
    encoder: StructFieldEncoder
    ignored: bool = False


def _resolve_conflict(old_tagged: bool, new_tagged: bool) -> tuple[bool, bool]:
    """Which of two fields sharing a JSON name to drop: (ignore_old, ignore_new)."""
    return True, old_tagged == new_tagged


def _string_mode(field_type, encoder):
    if isinstance(field_type, type):
        if issubclass(field_type, str):
            return StringModeStringEncoder(encoder)
        if issubclass(field_type, (bool, int, float)):
            return StringModeNumberEncoder(encoder)
    return encoder


# Names understood in annotations that were left as text.
_ANNOTATION_NAMES: dict[str, Any] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "bytearray": bytearray,
    "None": type(None),
    "NoneType": type(None),
    "Any": Any,
    "object": object,
    "Int8": Int8,
    "Int16": Int16,
    "Int32": Int32,
    "Int64": Int64,
    "Uint8": Uint8,
    "Uint16": Uint16,
    "Uint32": Uint32,
    "Uint64": Uint64,
    "Float32": Float32,
}
_LIST_HEADS = {"list", "List", "Sequence", "MutableSequence"}
_DICT_HEADS = {"dict", "Dict", "Mapping", "MutableMapping"}
_TUPLE_HEADS = {"tuple", "Tuple"}


def _split_top(text: str, separator: str) -> list[str]:
    """Split ``text`` on ``separator`` outside of brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        if ch == separator and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [part.strip() for part in parts]


def _union_of(members: list) -> Any:
    if len(members) == 1:
        return members[0]
    return typing.Union[tuple(members)]


def _resolve_annotation(text: str, owner: type) -> Any:
    """Turn an annotation written as text into a type, without running it.

    Names this module does not know resolve to ``Any``.
    """
    text = text.strip().strip("'\"").strip()
    for prefix in ("typing.", "collections.abc."):
        if text.startswith(prefix):
            text = text[len(prefix):]
    if text == "...":
        return Ellipsis
    alternatives = _split_top(text, "|")
    if len(alternatives) > 1:
        return _union_of([_resolve_annotation(part, owner) for part in alternatives])
    if text.endswith("]") and "[" in text:
        bracket = text.index("[")
        head = text[:bracket].strip()
        args = [_resolve_annotation(part, owner) for part in _split_top(text[bracket + 1:-1], ",")]
        if head in _LIST_HEADS:
            return list[args[0]]
        if head in _TUPLE_HEADS:
            return tuple[tuple(args)]
        if head in _DICT_HEADS and len(args) == 2:
            return dict[args[0], args[1]]
        if head == "Optional":
            return typing.Optional[args[0]]
        if head == "Union":
            return _union_of(args)
        return Any
    if text == owner.__name__ or text == owner.__qualname__:
        return owner
    return _ANNOTATION_NAMES.get(text, Any)


def _field_type(field: dataclasses.Field, owner: type) -> Any:
    if isinstance(field.type, str):
        return _resolve_annotation(field.type, owner)
    return field.type


def _struct_encoder(tp: type, config: EncoderConfig):
    bindings: list[_Binding] = []
    for field in dataclasses.fields(tp):
        if field.name.startswith("_"):
            continue
        tag = field.metadata.get(config.tag_key, "") if field.metadata else ""
        name_part, *options = tag.split(",")
        if name_part == "-" and not options:
            continue
        field_type = _field_type(field, tp)
        encoder = encoder_for(field_type, config)
        if "string" in options:
            encoder = _string_mode(field_type, encoder)
        binding = _Binding(
            to_name=name_part or field.name,
            tagged=bool(tag),
            encoder=StructFieldEncoder(field.name, encoder, "omitempty" in options),
        )
        for old in bindings:
            if old.to_name == binding.to_name:
                old.ignored, binding.ignored = _resolve_conflict(old.tagged, binding.tagged)
        bindings.append(binding)
    if not bindings:
        return EmptyStructEncoder()
    return StructEncoder(
        tp.__qualname__,
        [(b.to_name, b.encoder) for b in bindings if not b.ignored],
    )


_SEQUENCE_ORIGINS = (
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def _map_encoder(key_type, value_type, config: EncoderConfig):
    if key_type is not Any and not (
        isinstance(key_type, type) and issubclass(key_type, (str, int)) and key_type is not bool
    ):
        raise UnsupportedTypeError(f"unsupported map key type: {key_type!r}")
    return _MapEncoder(encoder_for(value_type, config), config.sort_map_keys)


def _build(tp, config: EncoderConfig):
    if tp is Any or tp is object or tp is None or tp is type(None):
        return DynamicEncoder(config)
    origin = typing.get_origin(tp)
    if origin is not None:
        args = typing.get_args(tp)
        if origin is typing.Union or origin is types.UnionType:
            present = [arg for arg in args if arg is not type(None)]
            if len(present) == 1:
                inner = encoder_for(present[0], config)
                return OptionalEncoder(inner) if len(present) < len(args) else inner
            return DynamicEncoder(config)
        if origin in _SEQUENCE_ORIGINS:
            name = repr(tp)
            if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
                return SliceEncoder(DynamicEncoder(config), name)
            elem = args[0] if args else Any
            return SliceEncoder(encoder_for(elem, config), name)
        if origin in _MAPPING_ORIGINS:
            key_type, value_type = args if len(args) == 2 else (Any, Any)
            return _map_encoder(key_type, value_type, config)
        raise UnsupportedTypeError(f"unsupported type: {tp!r}")
    native = native_encoder(tp, config.marshal_float_with_6_digits)
    if native is not None:
        if config.escape_html and type(native) is StringCodec:
            return _HtmlStringCodec()
        return native
    if isinstance(tp, type):
        if issubclass(tp, (list, tuple)):
            return SliceEncoder(DynamicEncoder(config), tp.__name__)
        if issubclass(tp, dict):
            return _MapEncoder(DynamicEncoder(config), config.sort_map_keys)
        if dataclasses.is_dataclass(tp):
            return _struct_encoder(tp, config)
    raise UnsupportedTypeError(f"unsupported type: {tp!r}")


_cache: dict = {}


def encoder_for(tp, config: EncoderConfig | None = None):
    """The encoder for values of type ``tp``; raises UnsupportedTypeError."""
    config = config or _DEFAULT_CONFIG
    key = (tp, config)
    try:
        cached = _cache.get(key)
    except TypeError:
        return _build(tp, config)
    if cached is not None:
        return cached
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        deferred = _Deferred()
        _cache[key] = deferred
        try:
            encoder = _build(tp, config)
        except BaseException:
            del _cache[key]
            raise
        deferred.target = encoder
    else:
        encoder = _build(tp, config)
    _cache[key] = encoder
    return encoder


def marshal(value, config: EncoderConfig | None = None) -> bytes:
    """JSON bytes of ``value``, chosen by its runtime type."""
    config = config or _DEFAULT_CONFIG
    stream = Stream(indention_step=config.indention_step)
    DynamicEncoder(config).encode(value, stream)
    return stream.buffer()


def marshal_to_string(value, config: EncoderConfig | None = None) -> str:
    """JSON text of ``value``."""
    return marshal(value, config).decode("utf-8", "surrogateescape")