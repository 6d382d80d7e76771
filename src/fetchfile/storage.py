from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from .errors import FetchIOError

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def exists(path: PathLike) -> bool:
    """Return whether ``path`` exists.

    Raises FetchIOError when the check itself fails (e.g. an unsearchable parent).
    """
    p = Path(path)
    try:
        return p.exists()
    except OSError as exc:
        raise FetchIOError(p, f"Failed to check file ({exc.strerror or exc})") from exc


def read_bytes(path: PathLike) -> bytes:
    """Read the whole file at ``path``.

    Raises FetchIOError if the file cannot be opened or read.
    """
    p = Path(path)
    logger.debug("Reading bytes from %s", p)
    try:
        with open(p, "rb") as f:
            return f.read()
    except OSError as exc:
        raise FetchIOError(p, f"Failed to read file ({exc.strerror or exc})") from exc


def write_bytes(path: PathLike, data: bytes) -> Path:
    """Create or truncate ``path``, write ``data`` and fsync before returning.

    Parent directories are not created. The file is written in place, so a
    crash mid-write can leave it partially written.

    Raises FetchIOError on open, write or sync failure.
    """
    p = Path(path)
    logger.debug("Writing %d bytes to %s", len(data), p)
    try:
        with open(p, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
    except OSError as exc:
        raise FetchIOError(p, f"Failed to write file ({exc.strerror or exc})") from exc
    return p
