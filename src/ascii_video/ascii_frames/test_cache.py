"""Tests for the cache token."""

from pathlib import Path

from ascii_video.ascii_frames.cache import CacheValidator


def test_record_then_validate(tmp_path: Path):
    cache = CacheValidator(tmp_path / ".cache")
    assert cache.record("a.mp4")
    assert cache.is_valid("a.mp4")
    assert not cache.is_valid("b.mp4")


def test_token_file_format(tmp_path: Path):
    token = tmp_path / "work" / ".cache"
    CacheValidator(token).record("videos/a.mp4")
    assert token.read_text() == "videos/a.mp4\n"


def test_no_normalization(tmp_path: Path):
    cache = CacheValidator(tmp_path / ".cache")
    cache.record("a.mp4")
    assert not cache.is_valid("./a.mp4")


def test_missing_token_is_invalid(tmp_path: Path):
    assert not CacheValidator(tmp_path / ".cache").is_valid("a.mp4")


def test_unreadable_token_is_invalid(tmp_path: Path):
    token = tmp_path / ".cache"
    token.write_bytes(b"\xff\xfe\xfa")
    assert not CacheValidator(token).is_valid("a.mp4")


def test_write_failure_is_not_raised(tmp_path: Path):
    # The token path is a directory, so opening it for writing fails
    token = tmp_path / ".cache"
    token.mkdir()
    assert CacheValidator(token).record("a.mp4") is False


def test_clear_invalidates(tmp_path: Path):
    token = tmp_path / ".cache"
    cache = CacheValidator(token)
    cache.record("a.mp4")
    cache.clear()
    assert not token.exists()
    assert not cache.is_valid("a.mp4")
    # Clearing twice is fine
    cache.clear()
