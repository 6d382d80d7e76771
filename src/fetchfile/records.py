"""Conversion between dataclass records and plain data trees.

Codecs only deal with plain data (dicts, lists, strings, numbers, booleans and
None). This module turns records into that shape and back, using pydantic for
serialization and type-directed validation.

The positional helpers rewrite every nested record mapping as a list of its
field values in declaration order. The binary format stores that layout, which
makes it compact and tied to the exact field order of the record type.
"""
from __future__ import annotations

import dataclasses
import sys
import typing
from typing import Any, Dict, List, Type, TypeVar, Union

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .errors import DecodeError, EncodeError

if sys.version_info >= (3, 10):
    from types import UnionType

    _UNION_TYPES = (Union, UnionType)
else:  # pragma: no cover
    _UNION_TYPES = (Union,)

T = TypeVar("T")

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


def is_record_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def to_plain(value: Any) -> Dict[str, Any]:
    """Serialize a record to a JSON-compatible dict in field order.

    Raises EncodeError when a field holds something that has no plain form
    (unknown object types, circular references).
    """
    record_type = type(value)
    if not is_record_type(record_type):
        raise EncodeError(f"{record_type.__name__} is not a dataclass record")
    try:
        return TypeAdapter(record_type).dump_python(value, mode="json")
    except (PydanticSerializationError, ValueError, TypeError, RecursionError) as exc:
        raise EncodeError(f"Cannot serialize {record_type.__name__}: {exc}") from exc


def from_plain(record_type: Type[T], data: Any) -> T:
    """Validate plain data into an instance of ``record_type``.

    Missing fields fall back to their declared defaults and unknown keys are
    ignored. Anything else that does not fit raises DecodeError.
    """
    if not isinstance(data, dict):
        raise DecodeError(
            f"Expected a mapping for {record_type.__name__}, got {type(data).__name__}"
        )
    try:
        return TypeAdapter(record_type).validate_python(data)
    except (ValidationError, RecursionError) as exc:
        raise DecodeError(f"Invalid data for {record_type.__name__}: {exc}") from exc


def to_positional(record_type: type, plain: Dict[str, Any]) -> List[Any]:
    return _flatten(record_type, plain)


def from_positional(record_type: type, data: Any) -> Dict[str, Any]:
    """Rebuild the field mapping of ``record_type`` from its positional layout.

    Raises DecodeError when the layout does not match the record's fields.
    """
    if not isinstance(data, list):
        raise DecodeError(
            f"Expected a field list for {record_type.__name__}, got {type(data).__name__}"
        )
    return _unflatten(record_type, data)


def _field_hints(record_type: type) -> List[tuple]:
    try:
        hints = typing.get_type_hints(record_type)
    except (NameError, TypeError):
        hints = {}
    return [(f.name, hints.get(f.name, Any)) for f in dataclasses.fields(record_type)]


def _flatten(tp: Any, data: Any) -> Any:
    if data is None:
        return None
    if is_record_type(tp):
        if not isinstance(data, dict):
            return data
        return [_flatten(hint, data.get(name)) for name, hint in _field_hints(tp)]
    return _walk(tp, data, _flatten)


def _unflatten(tp: Any, data: Any) -> Any:
    if data is None:
        return None
    if is_record_type(tp):
        if not isinstance(data, list):
            raise DecodeError(f"Expected a field list for {tp.__name__}, got {type(data).__name__}")
        hints = _field_hints(tp)
        if len(data) != len(hints):
            raise DecodeError(
                f"{tp.__name__} has {len(hints)} fields but the data holds {len(data)}"
            )
        return {name: _unflatten(hint, item) for (name, hint), item in zip(hints, data)}
    return _walk(tp, data, _unflatten)


def _walk(tp: Any, data: Any, step) -> Any:
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is typing.Annotated:
        return step(args[0], data)
    if origin in _UNION_TYPES:
        candidates = [a for a in args if a is not type(None)]
        # Unions of several shapes are stored as plain data and left to validation.
        if len(candidates) == 1:
            return step(candidates[0], data)
        return data
    if origin in _SEQUENCE_ORIGINS and isinstance(data, list):
        if origin is tuple and args and args[-1] is not Ellipsis:
            if len(args) != len(data):
                return data
            return [step(a, item) for a, item in zip(args, data)]
        item_type = args[0] if args else Any
        return [step(item_type, item) for item in data]
    if origin is dict and isinstance(data, dict):
        value_type = args[1] if len(args) == 2 else Any
        return {k: step(value_type, v) for k, v in data.items()}
    return data
