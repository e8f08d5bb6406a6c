"""Buffered JSON writing with typed encoders for scalars, sequences, mappings and dataclasses."""

__version__ = "0.1.0"

__all__ = ["numbers", "escape", "stream", "codecs", "encoders"]