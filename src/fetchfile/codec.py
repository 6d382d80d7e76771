"""The three interchangeable persistence formats.

Each codec works at two levels:

- ``dumps_plain``/``loads_plain`` move plain data trees to and from bytes
- ``encode``/``decode`` do the same for dataclass records, going through
  :mod:`fetchfile.records`

Codecs hold only formatting options and are cheap to build, so
:func:`codec_for` returns a fresh instance on every call.
"""
from __future__ import annotations

import io
import json
import logging
import pickle
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional, Type, TypeVar

import yaml

from .config import CodecOptions
from .errors import DecodeError, EncodeError
from .records import from_plain, from_positional, to_plain, to_positional

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Format(str, Enum):
    BINARY = "binary"
    STRUCTURED_TEXT = "structured_text"
    JSON = "json"

    @classmethod
    def parse(cls, name: str) -> "Format":
        """Resolve a format from its name or a common alias (``yaml``, ``bin``...)."""
        key = name.strip().lower().replace("-", "_")
        fmt = _ALIASES.get(key)
        if fmt is None:
            raise ValueError(f"Unknown format: {name!r}")
        return fmt


_ALIASES = {
    "binary": Format.BINARY,
    "bin": Format.BINARY,
    "structured_text": Format.STRUCTURED_TEXT,
    "text": Format.STRUCTURED_TEXT,
    "yaml": Format.STRUCTURED_TEXT,
    "yml": Format.STRUCTURED_TEXT,
    "json": Format.JSON,
}


class Codec(ABC):
    format: Format

    def __init__(self, options: Optional[CodecOptions] = None) -> None:
        self.options = options or CodecOptions()

    @abstractmethod
    def dumps_plain(self, data: Any) -> bytes:
        ...

    @abstractmethod
    def loads_plain(self, data: bytes) -> Any:
        ...

    def encode(self, value: Any) -> bytes:
        """Encode a dataclass record. Raises EncodeError."""
        return self.dumps_plain(to_plain(value))

    def decode(self, data: bytes, record_type: Type[T]) -> T:
        """Decode bytes into ``record_type``. Raises DecodeError."""
        return from_plain(record_type, self.loads_plain(data))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.options!r})"


class _PlainUnpickler(pickle.Unpickler):
    """Unpickler that only rebuilds builtin containers and scalars."""

    def find_class(self, module: str, name: str) -> Any:
        raise pickle.UnpicklingError(f"global '{module}.{name}' is forbidden")


class BinaryCodec(Codec):
    """Compact, order-dependent encoding of field values.

    Records are stored as nested lists of field values, so renaming is free
    but adding, removing or reordering fields invalidates existing files.
    """

    format = Format.BINARY

    def dumps_plain(self, data: Any) -> bytes:
        try:
            return pickle.dumps(data, protocol=self.options.binary_protocol)
        except (pickle.PicklingError, TypeError, ValueError, RecursionError) as exc:
            raise EncodeError(f"Cannot encode binary data: {exc}", self.format) from exc

    def loads_plain(self, data: bytes) -> Any:
        try:
            return _PlainUnpickler(io.BytesIO(data)).load()
        except Exception as exc:
            # Unpickling garbage can fail with nearly any exception type
            raise DecodeError(f"Invalid binary data: {exc}", self.format) from exc

    def encode(self, value: Any) -> bytes:
        return self.dumps_plain(to_positional(type(value), to_plain(value)))

    def decode(self, data: bytes, record_type: Type[T]) -> T:
        return from_plain(record_type, from_positional(record_type, self.loads_plain(data)))


class StructuredTextCodec(Codec):
    """Readable block-style YAML; comments in hand-edited files are ignored on load."""

    format = Format.STRUCTURED_TEXT

    def dumps_plain(self, data: Any) -> bytes:
        try:
            text = yaml.safe_dump(
                data,
                default_flow_style=False,
                sort_keys=self.options.sort_keys,
                indent=self.options.yaml_indent,
                allow_unicode=True,
            )
        except yaml.YAMLError as exc:
            raise EncodeError(f"Cannot encode structured text: {exc}", self.format) from exc
        return text.encode("utf-8")

    def loads_plain(self, data: bytes) -> Any:
        try:
            return yaml.safe_load(data.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError, ValueError, RecursionError) as exc:
            raise DecodeError(f"Invalid structured text: {exc}", self.format) from exc


class JsonCodec(Codec):
    format = Format.JSON

    def dumps_plain(self, data: Any) -> bytes:
        try:
            text = json.dumps(
                data,
                indent=self.options.json_indent,
                sort_keys=self.options.sort_keys,
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError, RecursionError) as exc:
            raise EncodeError(f"Cannot encode JSON: {exc}", self.format) from exc
        return text.encode("utf-8")

    def loads_plain(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError) as exc:
            raise DecodeError(f"Invalid JSON: {exc}", self.format) from exc


def codec_for(fmt: Format, options: Optional[CodecOptions] = None) -> Codec:
    fmt = Format(fmt)
    if fmt is Format.BINARY:
        return BinaryCodec(options)
    if fmt is Format.STRUCTURED_TEXT:
        return StructuredTextCodec(options)
    return JsonCodec(options)
