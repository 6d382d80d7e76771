from __future__ import annotations

from pathlib import Path

import pytest

from fetchfile import storage
from fetchfile.errors import FetchIOError


def test_write_then_read(tmp_path: Path):
    target = tmp_path / "blob.bin"
    written = storage.write_bytes(target, b"\x00\x01payload")
    assert written == target
    assert storage.exists(target)
    assert storage.read_bytes(target) == b"\x00\x01payload"


def test_write_truncates_existing_file(tmp_path: Path):
    target = tmp_path / "blob.bin"
    target.write_bytes(b"a much longer previous content")
    storage.write_bytes(str(target), b"short")
    assert target.read_bytes() == b"short"


def test_write_does_not_create_parent_directories(tmp_path: Path):
    target = tmp_path / "missing" / "blob.bin"
    with pytest.raises(FetchIOError) as excinfo:
        storage.write_bytes(target, b"x")
    assert excinfo.value.path == target
    assert isinstance(excinfo.value.__cause__, OSError)
    assert not target.parent.exists()


def test_read_missing_file_raises(tmp_path: Path):
    with pytest.raises(FetchIOError):
        storage.read_bytes(tmp_path / "nope")


def test_write_syncs_before_returning(tmp_path: Path, monkeypatch):
    synced = []
    real_fsync = storage.os.fsync

    def tracking_fsync(fd):
        synced.append(fd)
        real_fsync(fd)

    monkeypatch.setattr(storage.os, "fsync", tracking_fsync)
    storage.write_bytes(tmp_path / "blob.bin", b"x")
    assert len(synced) == 1


def test_sync_failure_is_reported(tmp_path: Path, monkeypatch):
    def failing_fsync(fd):
        raise OSError(5, "Input/output error")

    monkeypatch.setattr(storage.os, "fsync", failing_fsync)
    with pytest.raises(FetchIOError):
        storage.write_bytes(tmp_path / "blob.bin", b"x")


def test_exists_wraps_os_errors(tmp_path: Path, monkeypatch):
    def denied(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(storage.Path, "exists", denied)
    with pytest.raises(FetchIOError):
        storage.exists(tmp_path / "locked" / "blob.bin")
