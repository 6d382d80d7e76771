from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar, Optional, Type, TypeVar, Union

from . import recovery, storage
from .codec import Format, codec_for
from .config import CodecOptions
from .errors import DecodeError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound="Fetchable")
PathArg = Union[str, Path]


class Fetchable:
    """Mixin that lets a dataclass record save itself to disk and load back.

    Subclasses pick one ``active_format`` used by ``save``/``load``/
    ``fetch_or_default``; the per-format methods stay available to force a
    specific encoding (migration, inspection).

    Example::

        @dataclass
        class Config(Fetchable):
            active_format = Format.STRUCTURED_TEXT

            setting1: int = 0
            setting2: int = 5

        config, is_default = Config.fetch_or_default(path)
        if is_default:
            config.save(path)
    """

    active_format: ClassVar[Format] = Format.BINARY
    codec_options: ClassVar[CodecOptions] = CodecOptions()

    @classmethod
    def default(cls: Type[F]) -> F:
        return cls()

    # Encoding

    def encode(self, fmt: Optional[Format] = None) -> bytes:
        """Encode with ``fmt`` (or the active format). Raises EncodeError."""
        return codec_for(fmt or self.active_format, self.codec_options).encode(self)

    @classmethod
    def decode(cls: Type[F], data: bytes, fmt: Optional[Format] = None) -> F:
        """Decode with ``fmt`` (or the active format). Raises DecodeError."""
        return codec_for(fmt or cls.active_format, cls.codec_options).decode(data, cls)

    # Saving

    def save(self, path: PathArg) -> Path:
        """Write this record in the active format and fsync.

        EncodeError and FetchIOError propagate; a failed save is never silent.
        """
        return self._save_as(path, self.active_format)

    def save_binary(self, path: PathArg) -> Path:
        return self._save_as(path, Format.BINARY)

    def save_structured_text(self, path: PathArg) -> Path:
        return self._save_as(path, Format.STRUCTURED_TEXT)

    def save_json(self, path: PathArg) -> Path:
        return self._save_as(path, Format.JSON)

    def _save_as(self, path: PathArg, fmt: Format) -> Path:
        data = self.encode(fmt)
        written = storage.write_bytes(path, data)
        logger.debug("Saved %s to %s as %s", type(self).__name__, written, fmt.value)
        return written

    # Loading

    @classmethod
    def load(cls: Type[F], path: PathArg) -> F:
        """Read ``path`` and decode it with the active format.

        FetchIOError propagates. Undecodable content yields ``default()``
        instead of an error, so a stale or corrupt file only resets this value.
        """
        return cls._load_as(path, cls.active_format)

    @classmethod
    def load_binary(cls: Type[F], path: PathArg) -> F:
        return cls._load_as(path, Format.BINARY)

    @classmethod
    def load_structured_text(cls: Type[F], path: PathArg) -> F:
        return cls._load_as(path, Format.STRUCTURED_TEXT)

    @classmethod
    def load_json(cls: Type[F], path: PathArg) -> F:
        return cls._load_as(path, Format.JSON)

    @classmethod
    def _load_as(cls: Type[F], path: PathArg, fmt: Format) -> F:
        data = storage.read_bytes(path)
        try:
            return cls.decode(data, fmt)
        except DecodeError as exc:
            logger.warning("Resetting %s to default; %s is not valid %s: %s", cls.__name__, path, fmt.value, exc)
            return cls.default()

    # Recovery

    @classmethod
    def fetch_or_default(cls, path: PathArg) -> recovery.Outcome:
        return recovery.fetch_or_default(cls, path)

    @classmethod
    def fetch_or_init(cls, path: PathArg) -> recovery.Outcome:
        return recovery.fetch_or_init(cls, path)
