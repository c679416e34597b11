"""Per-frame conversion: rasterize, decode, quantize, write."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from ascii_video.ascii_frames.decoder import DecodeError, decode_raster
from ascii_video.ascii_frames.inventory import FrameRecord
from ascii_video.ascii_frames.palette import GlyphPalette
from ascii_video.external.extraction import rasterize_frame
from ascii_video.utils.dependencies import ExternalToolError

logger = logging.getLogger(__name__)

Rasterizer = Callable[[Path, int, int, float | None], bytes]


class FrameStatus(str, Enum):
    SKIPPED = "skipped"
    CONVERTED = "converted"
    FAILED = "failed"


@dataclass
class ConversionOutcome:
    record: FrameRecord
    status: FrameStatus
    reason: str | None = None


def write_atomic(path: Path, text: str) -> None:
    """Write text so that `path` either holds the complete content or does not change.

    The temporary file lives next to the target (same filesystem for the
    rename) and its name never matches a frame file name.
    """
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class FrameConverter:
    """
    Turn raster frames into glyph text frames.

    Frames whose text file already exists are skipped, so re-running on a
    partially converted set only does the missing work.
    """

    def __init__(
        self,
        palette: GlyphPalette,
        width: int,
        height: int,
        rasterizer: Rasterizer = rasterize_frame,
        timeout: float | None = None,
    ):
        self.palette = palette
        self.width = width
        self.height = height
        self.rasterizer = rasterizer
        self.timeout = timeout

    def frame_to_text(self, record: FrameRecord) -> str:
        raw = self.rasterizer(record.raster_path, self.width, self.height, self.timeout)
        matrix = decode_raster(raw, self.width, self.height)
        return self.palette.render(matrix)

    def convert_if_needed(self, record: FrameRecord) -> ConversionOutcome:
        if record.text_path.exists():
            return ConversionOutcome(record, FrameStatus.SKIPPED)

        try:
            text = self.frame_to_text(record)
            write_atomic(record.text_path, text)
        except (DecodeError, ExternalToolError, OSError) as e:
            logger.warning(f"Failed to convert {record.raster_path.name}: {e}")
            return ConversionOutcome(record, FrameStatus.FAILED, str(e))

        return ConversionOutcome(record, FrameStatus.CONVERTED)
