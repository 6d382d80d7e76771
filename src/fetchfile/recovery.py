"""Fetch-or-default recovery policy.

``fetch_or_default`` turns "no usable file" into data instead of an exception:
the caller always gets a value plus a flag telling whether that value came from
disk. Errors that lead to the default are logged on this module's logger at
WARNING so they can be diagnosed without changing the outcome.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, NamedTuple, Optional, Type, Union

from . import storage
from .codec import Format, codec_for
from .config import CodecOptions
from .errors import DecodeError, FetchIOError

logger = logging.getLogger(__name__)


class Outcome(NamedTuple):
    value: Any
    used_default: bool


def default_of(record_type: Type[Any]) -> Any:
    """Return the default value of ``record_type`` (``default()`` if defined, else ``cls()``)."""
    factory = getattr(record_type, "default", None)
    if callable(factory):
        return factory()
    return record_type()


def _resolve(
    record_type: Type[Any], fmt: Optional[Format], options: Optional[CodecOptions]
) -> tuple:
    if fmt is None:
        fmt = getattr(record_type, "active_format", Format.BINARY)
    if options is None:
        options = getattr(record_type, "codec_options", None)
    return fmt, options


def fetch_or_default(
    record_type: Type[Any],
    path: Union[str, Path],
    fmt: Optional[Format] = None,
    options: Optional[CodecOptions] = None,
) -> Outcome:
    """Load ``record_type`` from ``path`` or fall back to its default.

    - path missing: ``(default, True)``, nothing is read
    - path present and decodable: ``(value, False)``
    - existence check, read or decode failure: ``(default, True)``

    ``fmt`` defaults to the type's ``active_format``.
    """
    fmt, options = _resolve(record_type, fmt, options)
    p = Path(path)
    try:
        if not storage.exists(p):
            logger.debug("No file at %s; using default %s", p, record_type.__name__)
            return Outcome(default_of(record_type), True)
        data = storage.read_bytes(p)
        value = codec_for(fmt, options).decode(data, record_type)
    except (FetchIOError, DecodeError) as exc:
        logger.warning(
            "Using default %s; could not load %s as %s: %s",
            record_type.__name__,
            p,
            Format(fmt).value,
            exc,
        )
        return Outcome(default_of(record_type), True)
    return Outcome(value, False)


def fetch_or_init(
    record_type: Type[Any],
    path: Union[str, Path],
    fmt: Optional[Format] = None,
    options: Optional[CodecOptions] = None,
) -> Outcome:
    """Like :func:`fetch_or_default`, then write the default back when it was used.

    Save failures (EncodeError, FetchIOError) propagate.
    """
    fmt, options = _resolve(record_type, fmt, options)
    outcome = fetch_or_default(record_type, path, fmt, options)
    if outcome.used_default:
        storage.write_bytes(path, codec_for(fmt, options).encode(outcome.value))
        logger.info("Wrote default %s to %s", record_type.__name__, path)
    return outcome
