"""Tests for per-frame conversion."""

from pathlib import Path
from unittest.mock import patch

import pytest

from ascii_video.ascii_frames.converter import FrameConverter, FrameStatus, write_atomic
from ascii_video.ascii_frames.inventory import FrameRecord, list_frames
from ascii_video.ascii_frames.palette import GlyphPalette
from ascii_video.ascii_frames.scheduler import run_batches
from ascii_video.utils.dependencies import ExternalToolError


def uniform_pgm(width: int, height: int, value: int, maxval: int = 255) -> bytes:
    return f"P5\n{width} {height}\n{maxval}\n".encode() + bytes([value] * width * height)


def read_raster(path: Path, width: int, height: int, timeout: float | None) -> bytes:
    """Stand-in for the ffmpeg rasterizer: frames on disk already are PGM."""
    return path.read_bytes()


@pytest.fixture
def converter() -> FrameConverter:
    return FrameConverter(GlyphPalette(" .@"), 2, 2, rasterizer=read_raster)


def write_frames(directory: Path, values: list[int], maxval: int = 255) -> None:
    for i, value in enumerate(values, start=1):
        (directory / f"frame_{i:05d}.png").write_bytes(uniform_pgm(2, 2, value, maxval))


def test_four_frame_scenario(tmp_path: Path, converter: FrameConverter):
    # maxval 2 gives brightness 0.0, 0.5, 0.5, 1.0 exactly
    write_frames(tmp_path, [0, 1, 1, 2], maxval=2)
    summary = run_batches(list_frames(tmp_path), converter.convert_if_needed, batch_size=50)

    assert summary.converted == 4
    texts = [(tmp_path / f"frame_{i:05d}.txt").read_text() for i in range(1, 5)]
    assert texts == ["  \n  ", "..\n..", "..\n..", "@@\n@@"]


def test_rerun_skips_existing_text(tmp_path: Path, converter: FrameConverter):
    write_frames(tmp_path, [0, 255])
    records = list_frames(tmp_path)
    run_batches(records, converter.convert_if_needed, batch_size=50)
    before = [r.text_path.read_bytes() for r in records]

    rasterizer_calls = []
    converter.rasterizer = lambda *args: rasterizer_calls.append(args) or b""
    summary = run_batches(records, converter.convert_if_needed, batch_size=50)

    assert (summary.converted, summary.skipped) == (0, 2)
    assert rasterizer_calls == []
    assert [r.text_path.read_bytes() for r in records] == before


def test_only_missing_frames_are_converted(tmp_path: Path, converter: FrameConverter):
    write_frames(tmp_path, [0, 0, 0])
    (tmp_path / "frame_00002.txt").write_text("kept")
    summary = run_batches(list_frames(tmp_path), converter.convert_if_needed, batch_size=2)

    assert (summary.converted, summary.skipped) == (2, 1)
    assert (tmp_path / "frame_00002.txt").read_text() == "kept"


def test_corrupt_frame_is_isolated(tmp_path: Path, converter: FrameConverter):
    write_frames(tmp_path, [0, 0, 255])
    (tmp_path / "frame_00002.png").write_bytes(b"not a raster")
    summary = run_batches(list_frames(tmp_path), converter.convert_if_needed, batch_size=50)

    assert (summary.converted, summary.failed) == (2, 1)
    assert summary.failures[0].record.index == 2
    assert (tmp_path / "frame_00001.txt").read_text() == "  \n  "
    assert not (tmp_path / "frame_00002.txt").exists()
    assert (tmp_path / "frame_00003.txt").read_text() == "@@\n@@"


def test_tool_failure_is_reported(tmp_path: Path):
    def hung(*args):
        raise ExternalToolError("ffmpeg did not finish within 1s")

    converter = FrameConverter(GlyphPalette(" @"), 2, 2, rasterizer=hung, timeout=1)
    write_frames(tmp_path, [0])
    outcome = converter.convert_if_needed(FrameRecord(1, tmp_path))
    assert outcome.status == FrameStatus.FAILED
    assert "did not finish" in outcome.reason


def test_truncated_raster_converts(tmp_path: Path, converter: FrameConverter):
    (tmp_path / "frame_00001.png").write_bytes(b"P5\n2 2\n255\n" + bytes([255]))
    outcome = converter.convert_if_needed(FrameRecord(1, tmp_path))
    assert outcome.status == FrameStatus.CONVERTED
    assert (tmp_path / "frame_00001.txt").read_text() == "@ \n  "


def test_failed_write_leaves_no_output(tmp_path: Path, converter: FrameConverter):
    write_frames(tmp_path, [255])
    with patch("ascii_video.ascii_frames.converter.os.replace", side_effect=OSError("disk full")):
        outcome = converter.convert_if_needed(FrameRecord(1, tmp_path))

    assert outcome.status == FrameStatus.FAILED
    assert sorted(p.name for p in tmp_path.iterdir()) == ["frame_00001.png"]


def test_write_atomic_replaces(tmp_path: Path):
    target = tmp_path / "frame_00001.txt"
    target.write_text("old")
    write_atomic(target, "new")
    assert target.read_text() == "new"
    assert list(tmp_path.iterdir()) == [target]


def test_write_atomic_keeps_default_permissions(tmp_path: Path):
    reference = tmp_path / "reference.txt"
    reference.write_text("plain")
    target = tmp_path / "frame_00001.txt"
    write_atomic(target, "new")
    assert target.stat().st_mode & 0o777 == reference.stat().st_mode & 0o777
