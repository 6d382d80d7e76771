from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class FetchError(Exception):
    """Base exception for fetchfile errors."""


class FetchIOError(FetchError):
    """Raised when a file cannot be opened, read, written or synced."""

    def __init__(self, path: Union[str, Path], message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class DecodeError(FetchError):
    """Raised when bytes do not match the shape expected by a codec or record type."""

    def __init__(self, message: str, fmt: Optional[str] = None) -> None:
        super().__init__(message)
        self.format = fmt


class EncodeError(FetchError):
    """Raised when a record cannot be represented in the target format."""

    def __init__(self, message: str, fmt: Optional[str] = None) -> None:
        super().__init__(message)
        self.format = fmt
