"""Tests for settings and geometry models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from ascii_video.models.geometry import VideoGeometry
from ascii_video.models.settings import ConversionSettings


def test_output_height_from_aspect():
    geometry = VideoGeometry.from_source(1280, 720, 30.0, 100)
    assert geometry.output_height == 28


def test_default_width_on_full_hd():
    assert VideoGeometry.from_source(1920, 1080, 25.0, 120).output_height == 33


@pytest.mark.parametrize("args", [
    (1280, 720, 30.0, 0),
    (1280, 720, 30.0, -5),
    (4000, 10, 30.0, 10),
    (0, 720, 30.0, 100),
])
def test_invalid_geometry(args):
    with pytest.raises(ValueError):
        VideoGeometry.from_source(*args)


def test_settings_defaults():
    settings = ConversionSettings()
    assert settings.frames_dir == Path("temp_ascii") / "frames"
    assert settings.cache_path == Path("temp_ascii") / ".cache"
    assert len(settings.glyph_palette) == 15
    assert (settings.decode_batch_size, settings.render_batch_size) == (50, 100)


def test_settings_custom_paths():
    settings = ConversionSettings(work_dir=Path("work"), frames_subdir="f", cache_file=Path("token"))
    assert settings.frames_dir == Path("work/f")
    assert settings.cache_path == Path("token")


def test_settings_reject_single_glyph_palette():
    with pytest.raises(ValidationError):
        ConversionSettings(palette="#")


def test_settings_are_immutable():
    settings = ConversionSettings()
    with pytest.raises(ValidationError):
        settings.output_width = 10
