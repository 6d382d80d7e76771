"""
fetchfile: save any dataclass record to disk and load it back.

This package provides:
- Three interchangeable formats: compact binary, readable structured text
  (YAML) and JSON
- A ``Fetchable`` mixin giving records save/load in their chosen format
- A fetch-or-default policy that returns a safe default plus a flag instead
  of raising when a file is missing or unreadable

The caller owns every path: nothing here creates directories, locks files or
keeps state between calls.
"""
from .codec import BinaryCodec, Codec, Format, JsonCodec, StructuredTextCodec, codec_for
from .config import CodecOptions
from .errors import DecodeError, EncodeError, FetchError, FetchIOError
from .fetchable import Fetchable
from .recovery import Outcome, fetch_or_default, fetch_or_init

__version__ = "0.1.0"

__all__ = [
    "BinaryCodec",
    "Codec",
    "CodecOptions",
    "DecodeError",
    "EncodeError",
    "Fetchable",
    "FetchError",
    "FetchIOError",
    "Format",
    "JsonCodec",
    "Outcome",
    "StructuredTextCodec",
    "codec_for",
    "fetch_or_default",
    "fetch_or_init",
]
