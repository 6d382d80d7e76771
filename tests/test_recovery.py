from __future__ import annotations

import logging
from pathlib import Path

import pytest

from fetchfile import FetchIOError, Format, fetch_or_default, fetch_or_init, storage
from sample_records import (
    CORRUPT_PAYLOADS,
    HAS_DIGIT_LIMIT,
    OVERSIZED_INT_PAYLOADS,
    Config,
    JsonSettings,
    Profile,
    ProfileV2,
    sample_profile,
)


def test_walkthrough_save_fetch_then_corrupt(tmp_path: Path):
    path = tmp_path / "config.yaml"
    Config().save(path)

    value, used_default = Config.fetch_or_default(path)
    assert value == Config(setting1=0, setting2=5)
    assert used_default is False

    path.write_bytes(b"not valid")
    value, used_default = Config.fetch_or_default(path)
    assert value == Config(setting1=0, setting2=5)
    assert used_default is True


def test_missing_path_returns_default_without_reading(tmp_path: Path, monkeypatch):
    def no_reads(path):
        raise AssertionError("read attempted")

    monkeypatch.setattr(storage, "read_bytes", no_reads)
    outcome = fetch_or_default(JsonSettings, tmp_path / "absent.json")
    assert outcome.value == JsonSettings.default()
    assert outcome.used_default is True


@pytest.mark.parametrize("garbage", CORRUPT_PAYLOADS)
def test_corrupt_file_returns_default(tmp_path: Path, garbage: bytes):
    for record_type in (Config, Profile, JsonSettings):
        path = tmp_path / f"{record_type.__name__}.dat"
        path.write_bytes(garbage)
        outcome = record_type.fetch_or_default(path)
        assert outcome == (record_type.default(), True)


def test_unreadable_path_returns_default(tmp_path: Path):
    # A directory exists but cannot be read as a file
    outcome = fetch_or_default(Config, tmp_path)
    assert outcome == (Config.default(), True)


def test_save_then_fetch_in_every_format(tmp_path: Path):
    profile = sample_profile()
    for fmt in (Format.BINARY, Format.STRUCTURED_TEXT, Format.JSON):
        path = tmp_path / f"profile.{fmt.value}"
        storage.write_bytes(path, profile.encode(fmt))
        assert fetch_or_default(Profile, path, fmt) == (profile, False)


def test_schema_drift_in_binary_falls_back(tmp_path: Path):
    path = sample_profile().save(tmp_path / "profile.bin")
    assert ProfileV2.fetch_or_default(path) == (ProfileV2.default(), True)


def test_discarded_error_is_logged(tmp_path: Path, caplog):
    path = tmp_path / "settings.json"
    path.write_bytes(b"{ nope")
    with caplog.at_level(logging.WARNING, logger="fetchfile.recovery"):
        JsonSettings.fetch_or_default(path)
    assert any("settings.json" in r.getMessage() for r in caplog.records)


def test_missing_file_is_not_a_warning(tmp_path: Path, caplog):
    with caplog.at_level(logging.WARNING, logger="fetchfile.recovery"):
        Config.fetch_or_default(tmp_path / "absent.yaml")
    assert caplog.records == []


def test_fetch_or_init_writes_default_once(tmp_path: Path):
    path = tmp_path / "settings.json"
    first = JsonSettings.fetch_or_init(path)
    assert first == (JsonSettings.default(), True)
    assert path.exists()

    second = fetch_or_init(JsonSettings, path)
    assert second == (JsonSettings.default(), False)


def test_fetch_or_init_replaces_corrupt_file(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_bytes(b"not valid")
    assert Config.fetch_or_init(path).used_default is True
    assert Config.load(path) == Config.default()
    assert Config.fetch_or_default(path) == (Config.default(), False)


def test_fetch_or_init_propagates_save_failure(tmp_path: Path):
    with pytest.raises(FetchIOError):
        Config.fetch_or_init(tmp_path / "missing" / "config.yaml")


def test_failed_existence_check_returns_default(tmp_path: Path, monkeypatch):
    def denied(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(storage.Path, "exists", denied)
    assert Config.fetch_or_default(tmp_path / "locked" / "config.yaml") == (Config.default(), True)


@pytest.mark.skipif(not HAS_DIGIT_LIMIT, reason="interpreter has no int digit limit")
@pytest.mark.parametrize("garbage", OVERSIZED_INT_PAYLOADS)
def test_oversized_integers_return_default(tmp_path: Path, garbage: bytes):
    for record_type in (Config, Profile, JsonSettings):
        path = tmp_path / f"{record_type.__name__}.dat"
        path.write_bytes(garbage)
        assert record_type.fetch_or_default(path) == (record_type.default(), True)
