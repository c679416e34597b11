#!/usr/bin/env python3
"""
Convert a video into an ASCII-glyph video, reusing cached frames across runs
"""

import logging
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console

from ascii_video.ascii_frames.cache import CacheValidator
from ascii_video.ascii_frames.converter import FrameConverter
from ascii_video.ascii_frames.inventory import IMAGE_SUFFIX, TEXT_SUFFIX, count_frames, list_frames, remove_frames
from ascii_video.ascii_frames.scheduler import BatchSummary, ProgressReporter, run_batches
from ascii_video.external.extraction import extract_audio, extract_frames
from ascii_video.external.muxing import combine_video_audio, encode_frames
from ascii_video.external.rendering import FrameRenderer
from ascii_video.models.geometry import VideoGeometry
from ascii_video.models.settings import ConversionSettings
from ascii_video.utils.dependencies import check_ffmpeg
from ascii_video.utils.video import get_video_info

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "output_ascii.mp4"


class PipelineError(RuntimeError):
    """A whole stage failed (no frames extracted, every frame failed, ...)."""


@dataclass
class PipelineResult:
    frame_count: int
    conversion: BatchSummary
    rendering: BatchSummary | None = None


def prepare_frames(input_file: str, geometry: VideoGeometry, settings: ConversionSettings) -> int:
    """
    Make sure the frames directory holds raster frames extracted from input_file.

    Frames are reused when the cache token names the same input path.
    Otherwise the token is dropped, every raster/text/image frame is removed
    (including text frames left without rasters) and extraction is re-run.
    The token is written again only once extraction produced frames.

    Returns:
        Number of raster frames available
    """
    frames_dir = settings.frames_dir
    cache = CacheValidator(settings.cache_path)

    existing_count = count_frames(frames_dir)
    if existing_count > 0 and cache.is_valid(input_file):
        logger.info(f"Using {existing_count} cached frames")
        return existing_count

    cache.clear()
    removed = remove_frames(frames_dir)
    if removed > 0:
        logger.info("Input changed, regenerating frames...")
    else:
        logger.info("Extracting frames...")

    extract_frames(input_file, frames_dir, settings.output_fps, geometry.output_width, geometry.output_height)

    count = count_frames(frames_dir)
    if count == 0:
        raise PipelineError(f"No frames were extracted from {input_file}")

    logger.info(f"Frames extracted: {count}")
    cache.record(input_file)
    return count


def convert_frames(
    geometry: VideoGeometry,
    settings: ConversionSettings,
    console: Console,
    stop_event: threading.Event | None = None,
) -> BatchSummary:
    """Convert every raster frame lacking a text frame. Raises PipelineError if all of them fail."""
    records = list_frames(settings.frames_dir)
    if not records:
        raise PipelineError("No frames found")

    text_count = count_frames(settings.frames_dir, TEXT_SUFFIX)
    if text_count == len(records):
        logger.info(f"All {text_count} ASCII frames exist")

    converter = FrameConverter(
        settings.glyph_palette,
        geometry.output_width,
        geometry.output_height,
        timeout=settings.tool_timeout,
    )

    logger.info("Converting frames to ASCII...")
    with ProgressReporter(console) as progress:
        summary = run_batches(
            records,
            converter.convert_if_needed,
            settings.decode_batch_size,
            on_progress=progress,
            label="Converting to ASCII",
            workers=settings.workers,
            stop_event=stop_event,
        )

    logger.info(f"Converted {summary.converted} new frames ({summary.skipped} cached, {summary.failed} failed)")
    for outcome in summary.failures:
        logger.debug(f"{outcome.record.stem}: {outcome.reason}")

    if summary.failed and summary.failed == summary.total:
        raise PipelineError(f"All {summary.total} frames failed to convert")
    return summary


def render_frames(
    geometry: VideoGeometry,
    settings: ConversionSettings,
    console: Console,
    stop_event: threading.Event | None = None,
) -> BatchSummary:
    records = list_frames(settings.frames_dir, TEXT_SUFFIX)
    if not records:
        raise PipelineError("No ASCII frames found")

    logger.info(f"Rendering {len(records)} ASCII frames to images...")
    renderer = FrameRenderer(geometry.source_width, geometry.source_height)
    with ProgressReporter(console) as progress:
        summary = run_batches(
            records,
            renderer.render_if_needed,
            settings.render_batch_size,
            on_progress=progress,
            label="Rendering ASCII frames",
            workers=settings.workers,
            stop_event=stop_event,
        )

    if count_frames(settings.frames_dir, IMAGE_SUFFIX) == 0:
        raise PipelineError("No ASCII frames were rendered")
    return summary


def convert_video(
    input_file: str,
    output_file: str = DEFAULT_OUTPUT,
    settings: ConversionSettings | None = None,
    console: Console | None = None,
    stop_event: threading.Event | None = None,
) -> PipelineResult:
    """
    Run the full video to ASCII video conversion.

    Args:
        input_file: Path to the input video, as given on the command line
        output_file: Path of the resulting video
        settings: Conversion settings (defaults if omitted)
        console: Console used for progress output
        stop_event: When set, conversion stops at the next batch boundary

    Returns:
        PipelineResult with per-stage counts
    """
    settings = settings or ConversionSettings()
    console = console or Console()

    # Checked before anything is written to disk
    if not Path(input_file).is_file():
        raise FileNotFoundError(f"Input file does not exist: {input_file}")

    check_ffmpeg()
    video_info = get_video_info(input_file)
    geometry = VideoGeometry.from_source(video_info.width, video_info.height, video_info.fps, settings.output_width)
    logger.info(f"ASCII output: {geometry.output_width}x{geometry.output_height} characters")

    settings.frames_dir.mkdir(parents=True, exist_ok=True)

    frame_count = prepare_frames(input_file, geometry, settings)
    conversion = convert_frames(geometry, settings, console, stop_event)
    result = PipelineResult(frame_count=frame_count, conversion=conversion)
    if conversion.aborted:
        logger.warning("Conversion stopped before all frames were processed")
        return result

    audio_file = None
    if video_info.has_audio:
        logger.info("Processing audio...")
        audio_file = extract_audio(input_file, settings.work_dir)
    else:
        logger.info("No audio stream, output will be silent")

    result.rendering = render_frames(geometry, settings, console, stop_event)
    if result.rendering.aborted:
        logger.warning("Rendering stopped before all frames were processed")
        return result

    logger.info("Encoding video from images...")
    video_temp = settings.work_dir / "video_temp.mp4"
    encode_frames(settings.frames_dir, video_temp, settings.output_fps)

    logger.info("Combining video and audio...")
    combine_video_audio(video_temp, audio_file, output_file, settings.audio_bitrate)

    if settings.clean:
        logger.info(f"Removing {settings.work_dir}")
        shutil.rmtree(settings.work_dir)

    logger.info("Done!")
    return result


def main(
    input_file: str,
    output_file: str = DEFAULT_OUTPUT,
    settings: ConversionSettings | None = None,
    stop_event: threading.Event | None = None,
) -> PipelineResult:
    return convert_video(input_file, output_file, settings, stop_event=stop_event)
