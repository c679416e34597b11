"""Immutable conversion settings, built once from the CLI and passed to every stage."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ascii_video.ascii_frames.palette import DEFAULT_GLYPHS, GlyphPalette


class ConversionSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    palette: str = Field(DEFAULT_GLYPHS, description="Glyphs ordered dark to light")
    output_width: int = Field(120, gt=0, description="Glyph columns per frame")
    output_fps: float = Field(30, gt=0, description="Frame rate for extraction and final encode")
    audio_bitrate: str = Field("128k", description="Passed unchanged to the AAC encoder")
    work_dir: Path = Field(Path("temp_ascii"), description="Root of all intermediate artifacts")
    frames_subdir: str = Field("frames", description="Frames directory under work_dir")
    cache_file: Optional[Path] = Field(None, description="Cache token path (default: <work_dir>/.cache)")
    workers: int = Field(1, ge=1, description="Threads used to convert frames within a batch")
    tool_timeout: Optional[float] = Field(30.0, gt=0, description="Seconds before a per-frame tool call is abandoned")
    decode_batch_size: int = Field(50, ge=1)
    render_batch_size: int = Field(100, ge=1)
    clean: bool = Field(False, description="Remove work_dir after a successful run")

    @field_validator("palette")
    @classmethod
    def palette_has_two_glyphs(cls, v: str) -> str:
        if len(v) < 2:
            raise ValueError("palette must contain at least 2 glyphs")
        return v

    @property
    def frames_dir(self) -> Path:
        return self.work_dir / self.frames_subdir

    @property
    def cache_path(self) -> Path:
        return self.cache_file if self.cache_file is not None else self.work_dir / ".cache"

    @property
    def glyph_palette(self) -> GlyphPalette:
        return GlyphPalette(self.palette)


def default_workers() -> int:
    return os.cpu_count() or 1
