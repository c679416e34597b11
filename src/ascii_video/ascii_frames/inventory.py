"""Discover frame files on disk and derive their sibling paths."""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)

FRAME_PREFIX = "frame_"
INDEX_WIDTH = 5
RASTER_SUFFIX = ".png"
TEXT_SUFFIX = ".txt"
IMAGE_SUFFIX = "_ascii.png"


class FrameState(str, Enum):
    """Lifecycle of a frame, read from the filesystem."""
    MISSING = "missing"
    EXTRACTED = "extracted"
    CONVERTED = "converted"


@dataclass(frozen=True)
class FrameRecord:
    """A single frame identified by its index inside a frames directory."""
    index: int
    directory: Path
    raster_suffix: str = RASTER_SUFFIX

    @property
    def stem(self) -> str:
        return f"{FRAME_PREFIX}{self.index:0{INDEX_WIDTH}d}"

    @property
    def raster_path(self) -> Path:
        return self.directory / f"{self.stem}{self.raster_suffix}"

    @property
    def text_path(self) -> Path:
        return self.directory / f"{self.stem}{TEXT_SUFFIX}"

    @property
    def image_path(self) -> Path:
        return self.directory / f"{self.stem}{IMAGE_SUFFIX}"

    @property
    def state(self) -> FrameState:
        if self.text_path.exists():
            return FrameState.CONVERTED
        if self.raster_path.exists():
            return FrameState.EXTRACTED
        return FrameState.MISSING


def frame_pattern(suffix: str) -> re.Pattern[str]:
    return re.compile(rf"{re.escape(FRAME_PREFIX)}(\d{{{INDEX_WIDTH},}}){re.escape(suffix)}")


def list_frames(
    directory: Path,
    suffix: str = RASTER_SUFFIX,
    raster_suffix: str = RASTER_SUFFIX,
) -> List[FrameRecord]:
    """
    List frames whose file name is `frame_<index><suffix>`, ordered by index.

    Names are matched in full and case-sensitively; anything else in the
    directory is ignored. Directory iteration order never leaks into the result.
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    pattern = frame_pattern(suffix)
    indices = []
    for entry in directory.iterdir():
        match = pattern.fullmatch(entry.name)
        if match and entry.is_file():
            indices.append(int(match.group(1)))

    return [FrameRecord(index, directory, raster_suffix) for index in sorted(indices)]


def count_frames(directory: Path, suffix: str = RASTER_SUFFIX) -> int:
    return len(list_frames(directory, suffix))


def remove_frames(directory: Path, suffixes: Iterable[str] = (RASTER_SUFFIX, TEXT_SUFFIX, IMAGE_SUFFIX)) -> int:
    """Delete every frame file with one of the given suffixes. Returns the number removed."""
    directory = Path(directory)
    if not directory.is_dir():
        return 0

    patterns = [frame_pattern(suffix) for suffix in suffixes]
    removed = 0
    for entry in directory.iterdir():
        if entry.is_file() and any(p.fullmatch(entry.name) for p in patterns):
            entry.unlink()
            removed += 1
    logger.debug(f"Removed {removed} frame files from {directory}")
    return removed
